import json

import pytest

from upnpfind.cli import EXIT_ERROR, EXIT_NO_MATCH, EXIT_OK, build_parser, build_queries, run_find, run_list
from upnpfind.core.discovery import DeviceSource, StaticDeviceSource
from upnpfind.core.errors import SearchError
from upnpfind.core.models import DeviceDescription, DeviceQuery, Service, UPnPDevice

DEVICES = [
    UPnPDevice(Service(type='upnp:rootdevice', location='http://10.0.0.5:80/desc.xml', address='10.0.0.5'),
               DeviceDescription(manufacturer='Acme', model_name='CamX200', serial_number='SN1')),
    UPnPDevice(Service(type='upnp:rootdevice', location='http://10.0.0.6:80/desc.xml', address='10.0.0.6'),
               DeviceDescription(manufacturer='Other', model_name='Box', serial_number='SN2')),
]


class FailingSource(DeviceSource):
    def find_all(self, networks, root_only, cancel=None):
        raise SearchError('interface down')


def parse(*argv):
    return build_parser().parse_args(list(argv))


def test_build_queries_from_flags():
    args = parse('find', '--model', 'CamX.*', '--network', 'eth0', '--endpoint', 'a', '--endpoint', 'b')
    assert build_queries(args) == [DeviceQuery(model_name='CamX.*', network='eth0', endpoints=('a', 'b'))]


def test_build_queries_without_flags_matches_everything():
    assert build_queries(parse('find')) == [DeviceQuery()]


def test_build_queries_from_file(tmp_path):
    path = tmp_path / 'queries.json'
    path.write_text(json.dumps([{'manufacturer': 'Acme'}, {'model_name': 'Box', 'endpoints': ['x']}]))
    assert build_queries(parse('find', '--queries', str(path))) == [
        DeviceQuery(manufacturer='Acme'),
        DeviceQuery(model_name='Box', endpoints=('x',)),
    ]
    assert build_queries(parse('find', '--queries', str(path), '--serial', 'SN1'))[-1] == DeviceQuery(serial_number='SN1')


def test_find_prints_hosts(capsys):
    code = run_find(parse('find', '--model', 'CamX.*'), StaticDeviceSource(DEVICES))
    assert code == EXIT_OK
    assert capsys.readouterr().out.split() == ['10.0.0.5']


def test_find_json(capsys):
    code = run_find(parse('find', '--manufacturer', 'Other', '--endpoint', 'live', '--json'), StaticDeviceSource(DEVICES))
    assert code == EXIT_OK
    out = json.loads(capsys.readouterr().out)
    assert out['hosts'] == ['10.0.0.6/live']
    assert out['matches']['10.0.0.6']['manufacturer'] == 'Other'
    assert out['matches']['10.0.0.6']['endpoints'] == ['live']


def test_find_no_match(capsys):
    code = run_find(parse('find', '--model', 'Nope', '--json'), StaticDeviceSource(DEVICES))
    assert code == EXIT_NO_MATCH
    assert json.loads(capsys.readouterr().out) == {'hosts': [], 'matches': {}}


def test_find_search_failure():
    assert run_find(parse('find'), FailingSource()) == EXIT_ERROR


def test_find_bad_query_file(tmp_path):
    path = tmp_path / 'queries.json'
    path.write_text('{"model": "CamX"}')
    assert run_find(parse('find', '--queries', str(path)), StaticDeviceSource(DEVICES)) == EXIT_ERROR
    assert run_find(parse('find', '--queries', str(tmp_path / 'missing.json')), StaticDeviceSource(DEVICES)) == EXIT_ERROR


def test_list_json(capsys):
    code = run_list(parse('list', '--json'), StaticDeviceSource(DEVICES))
    assert code == EXIT_OK
    rows = json.loads(capsys.readouterr().out)
    assert [r['model_name'] for r in rows] == ['CamX200', 'Box']
    assert rows[0]['location'] == 'http://10.0.0.5:80/desc.xml'


def test_list_search_failure():
    assert run_list(parse('list', '--network', 'eth0'), FailingSource()) == EXIT_ERROR


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        parse()

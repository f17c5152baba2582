import pytest

from upnpfind.core.matcher import device_matches, matches
from upnpfind.core.models import DeviceDescription, DeviceQuery, Service, UPnPDevice


def make_device(model='CamX200', manufacturer='Acme', serial='SN-0001'):
    return UPnPDevice(
        Service(type='upnp:rootdevice', location='http://10.0.0.5:80/desc.xml'),
        DeviceDescription(manufacturer=manufacturer, model_name=model, serial_number=serial),
    )


@pytest.mark.parametrize('pattern,value,expected', [
    ('CamX200', 'CamX200', True),
    ('CamX', 'CamX200', False),
    ('CamX.*', 'CamX200', True),
    ('CamX.*', 'CamX', True),
    ('CamX.*', 'camx200', False),
    ('CamY.*', 'CamX200', False),
    ('.*', 'anything', True),
    ('.*', '', True),
    ('Cam*', 'CamX200', False),
    ('C.*X200', 'CamX200', False),
    ('', '', True),
])
def test_matches(pattern, value, expected):
    assert matches(pattern, value) is expected


def test_literal_dot_star_value_matches_itself():
    assert matches('a.*', 'a.*')


def test_empty_query_matches_any_device():
    assert device_matches(make_device(), DeviceQuery())
    assert device_matches(make_device('', '', ''), DeviceQuery())


def test_each_field_must_match():
    dev = make_device()
    assert device_matches(dev, DeviceQuery(model_name='CamX.*', manufacturer='Acme', serial_number='SN-.*'))
    assert not device_matches(dev, DeviceQuery(model_name='CamX.*', manufacturer='Other'))
    assert not device_matches(dev, DeviceQuery(serial_number='SN-0002'))
    assert not device_matches(dev, DeviceQuery(manufacturer='acme'))


def test_network_and_endpoints_are_not_matched():
    dev = make_device()
    assert device_matches(dev, DeviceQuery(network='does-not-exist', endpoints=('stream',)))


def test_device_matches_method():
    assert make_device().matches(DeviceQuery(model_name='CamX200'))
    assert not make_device().matches(DeviceQuery(model_name='CamX'))

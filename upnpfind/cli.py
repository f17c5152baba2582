import argparse
import json
import logging
import sys
from typing import List

from upnpfind.config import settings
from upnpfind.core.discovery import DeviceSource, SSDPDeviceSource
from upnpfind.core.errors import NoMatchError, QueryError, SearchError
from upnpfind.core.models import DeviceQuery
from upnpfind.core.resolver import find_host_map
from upnpfind.protocols.upnp import DescriptionFetcher

logger = logging.getLogger('upnpfind')

EXIT_OK = 0
EXIT_NO_MATCH = 1
EXIT_ERROR = 2


def setup_logging(debug: bool = False):
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(settings.LOG_FORMAT, settings.LOG_DATE_FORMAT))
    logger.handlers[:] = [handler]
    logger.setLevel(logging.DEBUG if debug else logging.INFO)


def load_queries(path: str) -> List[DeviceQuery]:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise QueryError(f"cannot read queries from {path}: {e}") from e
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise QueryError(f"{path} must contain a query object or a list of them")
    return [DeviceQuery.from_dict(item) for item in data]


def build_queries(args) -> List[DeviceQuery]:
    queries = load_queries(args.queries) if args.queries else []
    if args.model or args.manufacturer or args.serial or args.network or args.endpoint or not queries:
        queries.append(DeviceQuery(
            model_name=args.model or '',
            manufacturer=args.manufacturer or '',
            serial_number=args.serial or '',
            network=args.network or '',
            endpoints=tuple(args.endpoint or ()),
        ))
    return queries


def run_find(args, source: DeviceSource) -> int:
    try:
        queries = build_queries(args)
        result = find_host_map(queries, root_only=args.root_only, source=source)
    except QueryError as e:
        logger.error("%s", e)
        return EXIT_ERROR
    except SearchError as e:
        logger.error("discovery failed: %s", e)
        return EXIT_ERROR
    except NoMatchError as e:
        logger.info("%s", e)
        if args.json:
            print(json.dumps({'hosts': [], 'matches': {}}))
        return EXIT_NO_MATCH

    if args.json:
        print(json.dumps({
            'hosts': result.hosts,
            'matches': {host: query.to_dict() for host, query in result.queries.items()},
        }, indent=2))
    else:
        for host in result.hosts:
            print(host)
    logger.info("%d host(s) matched", len(result.hosts))
    return EXIT_OK


def run_list(args, source: DeviceSource) -> int:
    try:
        devices = source.find_all(list(dict.fromkeys(args.network or [])), args.root_only)
    except SearchError as e:
        logger.error("discovery failed: %s", e)
        return EXIT_ERROR

    rows = [{
        'address': dev.service.address,
        'type': dev.service.type,
        'location': dev.service.location,
        'manufacturer': dev.desc.manufacturer,
        'model_name': dev.desc.model_name,
        'serial_number': dev.desc.serial_number,
    } for dev in devices]
    if args.json:
        print(json.dumps(rows, indent=2))
    else:
        for row in rows:
            print(f"[+] {row['location']} {row['manufacturer']} / {row['model_name']} / {row['serial_number']} ({row['type']})")
    logger.info("%d device(s) described", len(rows))
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Find UPnP devices (cameras, etc.) by model, manufacturer or serial number")
    parser.add_argument('--debug', action='store_true', help='Enable debug output')
    parser.add_argument('--threads', type=int, default=settings.DEFAULT_THREADS, help='Threads for description fetches (default: 1)')
    parser.add_argument('--timeout', type=float, default=settings.DESCRIPTION_TIMEOUT, help='Description fetch timeout (seconds)')
    subparsers = parser.add_subparsers(dest='command', required=True)

    find_parser = subparsers.add_parser('find', help='Print hosts matching a query')
    find_parser.add_argument('--model', type=str, help='Model name, exact or prefix ending in .*')
    find_parser.add_argument('--manufacturer', type=str, help='Manufacturer, exact or prefix ending in .*')
    find_parser.add_argument('--serial', type=str, help='Serial number, exact or prefix ending in .*')
    find_parser.add_argument('--network', type=str, help='Network interface to search on')
    find_parser.add_argument('--endpoint', type=str, action='append', help='Endpoint appended to each matching host (repeatable)')
    find_parser.add_argument('--queries', type=str, help='JSON file with a query object or a list of them')
    find_parser.add_argument('--root-only', action='store_true', help='Only search for root devices')
    find_parser.add_argument('--wait', type=int, default=settings.DEFAULT_SEARCH_WAIT, help='SSDP response window (seconds)')
    find_parser.add_argument('--json', action='store_true', help='Print JSON instead of one host per line')

    list_parser = subparsers.add_parser('list', help='Describe every UPnP device that answers')
    list_parser.add_argument('--network', type=str, action='append', help='Network interface to search on (repeatable)')
    list_parser.add_argument('--root-only', action='store_true', help='Only search for root devices')
    list_parser.add_argument('--wait', type=int, default=settings.DEFAULT_SEARCH_WAIT, help='SSDP response window (seconds)')
    list_parser.add_argument('--json', action='store_true', help='Print JSON')
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.debug)
    source = SSDPDeviceSource(fetcher=DescriptionFetcher(timeout=args.timeout), wait_seconds=args.wait, threads=args.threads)
    if args.command == 'find':
        return run_find(args, source)
    return run_list(args, source)


if __name__ == '__main__':
    sys.exit(main())

import logging
import threading
from typing import List, Optional, Sequence
from urllib.parse import urlsplit

from upnpfind.config import settings
from upnpfind.core.discovery import DeviceSource, SSDPDeviceSource
from upnpfind.core.errors import NoMatchError
from upnpfind.core.models import DeviceQuery, HostResult, UPnPDevice

logger = logging.getLogger(__name__)


def parse_networks(queries: Sequence[DeviceQuery]) -> List[str]:
    """Distinct non-empty networks named by the queries, in order of first appearance."""
    networks = []
    for query in queries:
        if query.network and query.network not in networks:
            networks.append(query.network)
    return networks


def _hostname(device: UPnPDevice) -> Optional[str]:
    try:
        host = urlsplit(device.service.location).hostname
    except ValueError:
        host = None
    if not host:
        logger.warning(settings.ERROR_MESSAGES['invalid_location'].format(device.service.location))
        return None
    return host


def find_host_map(queries: Sequence[DeviceQuery], root_only: bool = False,
                  source: Optional[DeviceSource] = None,
                  cancel: Optional[threading.Event] = None) -> HostResult:
    """
    Discover devices and return the hosts matching at least one query.

    Each matching device yields its bare host name, or ``host/endpoint`` for
    every endpoint of the matching query. Entries are de-duplicated and every
    bare host is mapped to the first query it matched.

    Raises NoMatchError when nothing matched. Search failures and
    cancellation propagate from the device source.
    """
    queries = list(queries)
    source = source or SSDPDeviceSource()
    devices = source.find_all(parse_networks(queries), root_only, cancel)

    result = HostResult()
    seen = set()
    for device in devices:
        for query in queries:
            if not device.matches(query):
                continue
            host = _hostname(device)
            if host is None:
                break
            result.queries.setdefault(host, query)
            entries = [f"{host}/{endpoint}" for endpoint in query.endpoints] or [host]
            for entry in entries:
                if entry not in seen:
                    seen.add(entry)
                    result.hosts.append(entry)

    if not result.hosts:
        raise NoMatchError(queries)
    logger.debug("matched hosts %s", result.hosts)
    return result


def find_host(queries: Sequence[DeviceQuery], root_only: bool = False,
              source: Optional[DeviceSource] = None,
              cancel: Optional[threading.Event] = None) -> List[str]:
    """Like find_host_map but only returns the host list."""
    return find_host_map(queries, root_only, source, cancel).hosts

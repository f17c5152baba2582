import logging
import socket
import time
from typing import Dict, List, Optional

from upnpfind.config import settings
from upnpfind.core.errors import SearchError
from upnpfind.core.models import Service

logger = logging.getLogger(__name__)


class SSDPSearcher:
    """
    SSDP M-SEARCH over UDP multicast.
    Sends one search for the requested target and collects unicast responses
    until the MX window (plus a short grace period) has passed.
    """
    def __init__(self, grace: float = settings.SEARCH_GRACE):
        self.grace = grace

    def search(self, search_type: str, wait_seconds: int, interface: str = '') -> List[Service]:
        where = interface or 'default interface'
        try:
            sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
        except OSError as e:
            raise SearchError(settings.ERROR_MESSAGES['search_failed'].format(search_type, where, e)) from e
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, settings.SSDP_TTL)
            if interface:
                iface_addr = self._get_iface_addr(interface)
                sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_IF, socket.inet_aton(iface_addr))
                sock.bind((iface_addr, 0))
            sock.sendto(build_msearch(search_type, wait_seconds), (settings.SSDP_ADDR, settings.SSDP_PORT))
            return self._collect(sock, wait_seconds + self.grace)
        except OSError as e:
            raise SearchError(settings.ERROR_MESSAGES['search_failed'].format(search_type, where, e)) from e
        finally:
            sock.close()

    def _collect(self, sock: socket.socket, window: float) -> List[Service]:
        services = []
        seen_keys = set()
        deadline = time.monotonic() + window
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            sock.settimeout(remaining)
            try:
                data, addr = sock.recvfrom(settings.SSDP_RECV_BUFFER)
            except socket.timeout:
                break
            except OSError as e:
                logger.debug("dropping SSDP response: %s", e)
                continue
            headers = parse_ssdp_response(data.decode(errors='ignore'))
            service = service_from_headers(headers, addr[0])
            if service is None:
                continue
            key = (service.location, service.usn, service.type)
            if key in seen_keys:
                continue
            seen_keys.add(key)
            services.append(service)
        return services

    def _get_iface_addr(self, iface: str) -> str:
        import netifaces
        try:
            addrs = netifaces.ifaddresses(iface)
            return addrs[netifaces.AF_INET][0]['addr']
        except (ValueError, KeyError, IndexError) as e:
            raise SearchError(settings.ERROR_MESSAGES['unknown_interface'].format(iface)) from e


def build_msearch(search_type: str, wait_seconds: int) -> bytes:
    return (
        'M-SEARCH * HTTP/1.1\r\n'
        f'HOST: {settings.SSDP_ADDR}:{settings.SSDP_PORT}\r\n'
        'MAN: "ssdp:discover"\r\n'
        f'MX: {wait_seconds}\r\n'
        f'ST: {search_type}\r\n'
        '\r\n'
    ).encode()


def parse_ssdp_response(response: str) -> Dict[str, str]:
    headers = {}
    for line in response.split('\r\n'):
        if ':' in line:
            k, v = line.split(':', 1)
            headers[k.strip().lower()] = v.strip()
    return headers


def service_from_headers(headers: Dict[str, str], address: str) -> Optional[Service]:
    """Build a Service from response headers; responses without LOCATION are ignored."""
    location = headers.get('location')
    if not location:
        return None
    return Service(
        type=headers.get('st') or headers.get('nt', ''),
        location=location,
        usn=headers.get('usn', ''),
        server=headers.get('server', ''),
        address=address,
        headers=headers,
    )

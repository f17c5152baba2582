"""
Discovery engine: turns SSDP advertisements into described UPnP devices.

A ``DeviceSource`` is what host resolution talks to. ``SSDPDeviceSource``
does the real work on the network; ``StaticDeviceSource`` hands back a
fixed list so callers can run resolution without any network access.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

from upnpfind.config import settings
from upnpfind.core.errors import DescriptionError, DiscoveryCancelled
from upnpfind.core.models import Service, UPnPDevice
from upnpfind.protocols.ssdp import SSDPSearcher
from upnpfind.protocols.upnp import DescriptionFetcher

logger = logging.getLogger(__name__)


class DeviceSource:
    def find_all(self, networks: Sequence[str], root_only: bool,
                 cancel: Optional[threading.Event] = None) -> List[UPnPDevice]:
        """Return every device found on ``networks``; an empty list means the default interface."""
        raise NotImplementedError


class StaticDeviceSource(DeviceSource):
    def __init__(self, devices: Sequence[UPnPDevice]):
        self.devices = list(devices)

    def find_all(self, networks, root_only, cancel=None):
        if cancel is not None and cancel.is_set():
            raise DiscoveryCancelled()
        return list(self.devices)


class SSDPDeviceSource(DeviceSource):
    """
    Search each network in turn and fetch a description for every advertisement.

    A failed search aborts the whole call (the interface is most likely
    unusable). A failed description only drops that one advertisement.
    """
    def __init__(self, searcher: Optional[SSDPSearcher] = None, fetcher: Optional[DescriptionFetcher] = None,
                 wait_seconds: int = settings.DEFAULT_SEARCH_WAIT, threads: int = settings.DEFAULT_THREADS):
        self.searcher = searcher or SSDPSearcher()
        self.fetcher = fetcher or DescriptionFetcher()
        self.wait_seconds = wait_seconds
        self.threads = threads

    def find_all(self, networks, root_only, cancel=None):
        # root devices only cuts down the number of descriptions to fetch
        search_type = settings.SEARCH_ROOT_DEVICE if root_only else settings.SEARCH_ALL
        devices = []
        for network in list(networks) or ['']:
            self._check_cancel(cancel)
            services = self.searcher.search(search_type, self.wait_seconds, network)
            for srv in services:
                logger.debug("found service (%s) at %s", srv.type, srv.location)
            devices.extend(self._describe_all(services, cancel))
        logger.debug("resolved %d device(s) on %s", len(devices), list(networks) or 'default interface')
        return devices

    def _describe_all(self, services: List[Service], cancel) -> List[UPnPDevice]:
        if self.threads > 1 and len(services) > 1:
            with ThreadPoolExecutor(max_workers=self.threads) as executor:
                futs = [executor.submit(self._describe, srv, cancel) for srv in services]
                try:
                    results = [fut.result() for fut in futs]
                except DiscoveryCancelled:
                    for fut in futs:
                        fut.cancel()
                    raise
        else:
            results = [self._describe(srv, cancel) for srv in services]
        return [dev for dev in results if dev is not None]

    def _describe(self, srv: Service, cancel) -> Optional[UPnPDevice]:
        self._check_cancel(cancel)
        try:
            desc = self.fetcher.fetch(srv.location, cancel)
        except DescriptionError as e:
            logger.warning("cannot read description %s", e)
            return None
        return UPnPDevice(srv, desc)

    @staticmethod
    def _check_cancel(cancel: Optional[threading.Event]):
        if cancel is not None and cancel.is_set():
            raise DiscoveryCancelled()

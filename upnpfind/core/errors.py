from typing import Sequence

from upnpfind.config import settings


class UPnPFindError(Exception):
    """Base class for every error raised by upnpfind."""


class QueryError(UPnPFindError, ValueError):
    """A query could not be built from user input."""


class SearchError(UPnPFindError):
    """The SSDP search itself failed (socket or interface problem)."""


class DescriptionError(UPnPFindError):
    """A device description could not be fetched or decoded."""

    def __init__(self, url: str, message: str):
        super().__init__(message)
        self.url = url


class DiscoveryCancelled(UPnPFindError):
    def __init__(self):
        super().__init__(settings.ERROR_MESSAGES['cancelled'])


class NoMatchError(UPnPFindError):
    """No discovered device satisfied any of the queries."""

    def __init__(self, queries: Sequence):
        self.queries = list(queries)
        super().__init__(settings.ERROR_MESSAGES['no_match'].format(self.queries))

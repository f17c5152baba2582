"""
Data structures shared by discovery, matching and host resolution
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Mapping, Tuple

from upnpfind.core.errors import QueryError
from upnpfind.core.matcher import device_matches

_QUERY_KEYS = ('model_name', 'manufacturer', 'serial_number', 'network', 'endpoints')


@dataclass(frozen=True)
class DeviceQuery:
    """
    Criteria a device has to meet. Empty fields match anything; a field
    ending in ``.*`` is a prefix match. ``network`` scopes the search to an
    interface and ``endpoints`` are appended to the resolved host.
    """
    model_name: str = ''
    manufacturer: str = ''
    serial_number: str = ''
    network: str = ''
    endpoints: Tuple[str, ...] = ()

    def __post_init__(self):
        # accept lists from callers but keep the query hashable
        object.__setattr__(self, 'endpoints', tuple(self.endpoints or ()))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'DeviceQuery':
        if not isinstance(data, Mapping):
            raise QueryError(f"query must be an object, got {type(data).__name__}")
        unknown = set(data) - set(_QUERY_KEYS)
        if unknown:
            raise QueryError(f"unknown query field(s): {', '.join(sorted(unknown))}")
        values = {}
        for key in _QUERY_KEYS[:-1]:
            value = data.get(key)
            if value is None:
                value = ''
            if not isinstance(value, str):
                raise QueryError(f"query field {key} must be a string")
            values[key] = value
        endpoints = data.get('endpoints')
        if endpoints is None:
            endpoints = []
        if not isinstance(endpoints, list) or not all(isinstance(e, str) for e in endpoints):
            raise QueryError("query field endpoints must be a list of strings")
        return cls(endpoints=tuple(endpoints), **values)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['endpoints'] = list(self.endpoints)
        return data


@dataclass(frozen=True)
class Service:
    """One SSDP advertisement (M-SEARCH response)."""
    type: str
    location: str
    usn: str = ''
    server: str = ''
    address: str = ''
    headers: Dict[str, str] = field(default_factory=dict, compare=False, hash=False)


@dataclass(frozen=True)
class DeviceDescription:
    """The parts of a UPnP device description used for matching."""
    manufacturer: str = ''
    model_name: str = ''
    serial_number: str = ''
    spec_major: int = 0
    spec_minor: int = 0


@dataclass(frozen=True)
class UPnPDevice:
    service: Service
    desc: DeviceDescription

    def matches(self, query: DeviceQuery) -> bool:
        return device_matches(self, query)


@dataclass
class HostResult:
    """Resolved hosts plus the first query each bare host matched."""
    hosts: List[str] = field(default_factory=list)
    queries: Dict[str, DeviceQuery] = field(default_factory=dict)

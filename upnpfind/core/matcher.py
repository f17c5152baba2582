"""
Query matching for discovered UPnP devices.

Patterns are either literal values or a prefix followed by ``.*``. Nothing
else is treated as a wildcard and comparisons are case-sensitive.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from upnpfind.core.models import DeviceQuery, UPnPDevice

WILDCARD_SUFFIX = '.*'


def matches(pattern: str, value: str) -> bool:
    if pattern == value:
        return True
    if pattern.endswith(WILDCARD_SUFFIX):
        return value.startswith(pattern[:-len(WILDCARD_SUFFIX)])
    return False


def device_matches(device: 'UPnPDevice', query: 'DeviceQuery') -> bool:
    """Check model name, manufacturer and serial number; empty query fields are ignored."""
    desc = device.desc
    if query.model_name and not matches(query.model_name, desc.model_name):
        return False
    if query.manufacturer and not matches(query.manufacturer, desc.manufacturer):
        return False
    if query.serial_number and not matches(query.serial_number, desc.serial_number):
        return False
    return True

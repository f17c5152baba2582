import logging
import threading
import xml.etree.ElementTree as ET
from typing import Optional

import requests

from upnpfind.config import settings
from upnpfind.core.errors import DescriptionError, DiscoveryCancelled
from upnpfind.core.models import DeviceDescription

logger = logging.getLogger(__name__)


class DescriptionFetcher:
    """
    Fetch and decode UPnP device description XML.
    One GET per call, bounded by ``timeout``; failures are raised, never retried.
    """
    def __init__(self, timeout: float = settings.DESCRIPTION_TIMEOUT, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self, url: str, cancel: Optional[threading.Event] = None) -> DeviceDescription:
        if cancel is not None and cancel.is_set():
            raise DiscoveryCancelled()
        try:
            resp = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise DescriptionError(url, settings.ERROR_MESSAGES['fetch_failed'].format(url, e)) from e
        try:
            if cancel is not None and cancel.is_set():
                raise DiscoveryCancelled()
            if not 200 <= resp.status_code < 300:
                raise DescriptionError(url, settings.ERROR_MESSAGES['bad_status'].format(url, resp.status_code))
            data = resp.content
        finally:
            resp.close()
        return parse_device_desc(url, data)


def _local_name(tag: str) -> str:
    if '}' in tag:
        return tag.split('}', 1)[1]
    return tag


def _child(elem: Optional[ET.Element], name: str) -> Optional[ET.Element]:
    if elem is None:
        return None
    for child in elem:
        if _local_name(child.tag) == name:
            return child
    return None


def _text(elem: Optional[ET.Element], name: str) -> str:
    child = _child(elem, name)
    if child is None or child.text is None:
        return ''
    return child.text


def _int(url: str, elem: Optional[ET.Element], name: str) -> int:
    value = _text(elem, name).strip()
    if not value:
        return 0
    try:
        return int(value)
    except ValueError as e:
        raise DescriptionError(url, settings.ERROR_MESSAGES['bad_xml'].format(url, e)) from e


def parse_device_desc(url: str, data: bytes) -> DeviceDescription:
    """
    Decode a description document. Only ``specVersion`` and the top-level
    ``device`` element are read; namespaces are ignored.
    """
    try:
        root = ET.fromstring(data)
    except (ET.ParseError, ValueError, LookupError) as e:
        # ValueError: multi-byte declared encodings, LookupError: unknown encodings
        raise DescriptionError(url, settings.ERROR_MESSAGES['bad_xml'].format(url, e)) from e
    if _local_name(root.tag) != 'root':
        raise DescriptionError(url, settings.ERROR_MESSAGES['bad_root'].format(url, _local_name(root.tag)))

    version = _child(root, 'specVersion')
    device = _child(root, 'device')
    desc = DeviceDescription(
        manufacturer=_text(device, 'manufacturer'),
        model_name=_text(device, 'modelName'),
        serial_number=_text(device, 'serialNumber'),
        spec_major=_int(url, version, 'major'),
        spec_minor=_int(url, version, 'minor'),
    )
    logger.debug("got description %s from %s", desc, url)
    return desc

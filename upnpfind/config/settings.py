"""
Configuration settings for UPnP discovery and host matching
"""

# SSDP multicast group
SSDP_ADDR = '239.255.255.250'
SSDP_PORT = 1900
SSDP_RECV_BUFFER = 65507
SSDP_TTL = 2

# Search targets
SEARCH_ALL = 'ssdp:all'
SEARCH_ROOT_DEVICE = 'upnp:rootdevice'

# Discovery settings
DEFAULT_SEARCH_WAIT = 1  # seconds
SEARCH_GRACE = 0.5  # seconds
DESCRIPTION_TIMEOUT = 10  # seconds
DEFAULT_THREADS = 1

# Logging settings
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Error messages
ERROR_MESSAGES = {
    'fetch_failed': "can't fetch xml({}): {}",
    'bad_status': "http fetch ({}) not ok: {}",
    'bad_xml': "bad xml from ({}): {}",
    'bad_root': "bad xml from ({}): expected element <root> but have <{}>",
    'no_match': "no match found for queries: {}",
    'unknown_interface': "Could not get address for interface {}",
    'search_failed': "SSDP search ({}) on {} failed: {}",
    'cancelled': "discovery cancelled",
    'invalid_location': "invalid location {}",
}

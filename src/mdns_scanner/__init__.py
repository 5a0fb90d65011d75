"""mDNS Scanner - live terminal view of hosts advertising an mDNS service type.

Listens for multicast DNS responses to a service-type query and shows one row
per host name with its IPv4 and IPv6 addresses.
"""

__version__ = "0.1.0"

from .config import Config

__all__ = ["Config"]

"""
Record models for the mDNS scanner.
"""
from .common import AddressFamily, BasePydanticModel, IPAddress, RecordKind
from .records import AddressBinding, BindingSet, HostAddresses

__all__ = [
    "AddressBinding",
    "AddressFamily",
    "BasePydanticModel",
    "BindingSet",
    "HostAddresses",
    "IPAddress",
    "RecordKind",
]

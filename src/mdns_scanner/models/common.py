from enum import Enum
from ipaddress import IPv4Address, IPv6Address
from typing import Union

from pydantic import BaseModel


IPAddress = Union[IPv4Address, IPv6Address]


class BasePydanticModel(BaseModel):
    model_config = {
        "extra": "forbid",
        "populate_by_name": True,
        "use_enum_values": True,
    }

class AddressFamily(str, Enum):
    IPV4 = "ipv4"
    IPV6 = "ipv6"

    @classmethod
    def of(cls, address: IPAddress) -> "AddressFamily":
        """Classifies an address. The only place that inspects the IP version."""
        if address.version == 4:
            return cls.IPV4
        return cls.IPV6

    @property
    def rank(self) -> int:
        # IPv4 bindings sort before IPv6 ones
        return 0 if self is AddressFamily.IPV4 else 1

class RecordKind(str, Enum):
    A = "A"
    AAAA = "AAAA"
    OTHER = "other"

"""
Record model: one discovered address binding and the ordered, deduplicated
set of bindings a scan accumulates.
"""
import ipaddress
from collections.abc import Iterable, Iterator
from typing import NamedTuple, Optional

from pydantic import model_validator

from .common import AddressFamily, BasePydanticModel, IPAddress


class AddressBinding(BasePydanticModel):
    """A single (address family, address, host name) fact. Immutable."""

    # Keep the enum member itself; the family is compared by identity.
    model_config = {
        "extra": "forbid",
        "frozen": True,
        "use_enum_values": False,
    }

    family: AddressFamily
    address: IPAddress
    host_name: str

    @model_validator(mode="after")
    def _family_matches_address(self) -> "AddressBinding":
        if AddressFamily.of(self.address) is not self.family:
            raise ValueError(f"address {self.address} is not an {self.family.value} address")
        return self

    @classmethod
    def from_address(cls, address: IPAddress | str | bytes, host_name: str) -> "AddressBinding":
        """Builds a binding, deriving the family from the address."""
        ip = ipaddress.ip_address(address)
        return cls(family=AddressFamily.of(ip), address=ip, host_name=host_name)

    @property
    def slot(self) -> tuple[AddressFamily, str]:
        """Bindings sharing a slot replace each other."""
        return (self.family, self.host_name)

    @property
    def sort_key(self) -> tuple[int, IPAddress, str]:
        return (self.family.rank, self.address, self.host_name)

    def __str__(self) -> str:
        return f"{self.host_name}: {self.address}"


class HostAddresses(NamedTuple):
    ipv4: Optional[IPAddress]
    ipv6: Optional[IPAddress]


class BindingSet:
    """
    Ordered collection of AddressBinding values holding at most one binding
    per (family, host_name) slot. Iteration follows AddressBinding.sort_key.
    """

    def __init__(self, bindings: Iterable[AddressBinding] = ()):
        self._bindings: list[AddressBinding] = []
        self.merge(bindings)

    def merge(self, batch: Iterable[AddressBinding]) -> None:
        """Applies a batch: each binding evicts whatever held its slot, then the set is re-sorted."""
        by_slot = {binding.slot: binding for binding in self._bindings}
        for binding in batch:
            by_slot.pop(binding.slot, None)
            by_slot[binding.slot] = binding
        self._bindings = sorted(by_slot.values(), key=lambda b: b.sort_key)

    def clear(self) -> None:
        self._bindings = []

    def copy(self) -> "BindingSet":
        clone = BindingSet()
        clone._bindings = list(self._bindings)
        return clone

    def lookup(self, host_name: str) -> HostAddresses:
        """
        Returns the IPv4 and IPv6 address recorded for a host, None where absent.
        Should a slot ever hold more than one binding, the last one in iteration order wins.
        """
        found: dict[AddressFamily, IPAddress] = {}
        for binding in self._bindings:
            if binding.host_name == host_name:
                found[binding.family] = binding.address
        return HostAddresses(ipv4=found.get(AddressFamily.IPV4), ipv6=found.get(AddressFamily.IPV6))

    def distinct_host_names(self) -> list[str]:
        """Unique host names in first-seen iteration order, one per display row."""
        seen: dict[str, None] = {}
        for binding in self._bindings:
            seen.setdefault(binding.host_name, None)
        return list(seen)

    def __iter__(self) -> Iterator[AddressBinding]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BindingSet):
            return NotImplemented
        return self._bindings == other._bindings

    def __repr__(self) -> str:
        return f"BindingSet({self._bindings!r})"

    def __str__(self) -> str:
        return "".join(f"{binding}\n" for binding in self._bindings)

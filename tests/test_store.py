"""Tests for RecordStore."""
import random
import threading
from ipaddress import IPv4Address, IPv6Address

from mdns_scanner.models import AddressBinding, AddressFamily
from mdns_scanner.store import RecordStore

HOSTS = ["a.local", "b.local", "c.local"]


def random_binding(rng: random.Random) -> AddressBinding:
    host = rng.choice(HOSTS)
    if rng.random() < 0.5:
        return AddressBinding.from_address(IPv4Address(rng.randrange(1, 2**32)), host)
    return AddressBinding.from_address(IPv6Address(rng.randrange(1, 2**128)), host)


def test_apply_keeps_latest_binding_per_slot():
    rng = random.Random(1234)
    for _ in range(50):
        store = RecordStore()
        latest: dict[tuple[AddressFamily, str], AddressBinding] = {}
        for _ in range(rng.randrange(1, 8)):
            batch = [random_binding(rng) for _ in range(rng.randrange(0, 5))]
            store.apply(batch)
            for binding in batch:
                latest[binding.slot] = binding

        snapshot = store.snapshot()
        slots = [binding.slot for binding in snapshot]
        assert len(slots) == len(set(slots))
        assert set(snapshot) == set(latest.values())


def test_apply_same_batch_twice_is_idempotent():
    batch = [
        AddressBinding.from_address("10.0.0.5", "a"),
        AddressBinding.from_address("::1", "a"),
    ]
    once = RecordStore()
    once.apply(batch)
    twice = RecordStore()
    twice.apply(batch)
    twice.apply(batch)
    assert once.snapshot() == twice.snapshot()


def test_apply_empty_batch_is_noop():
    store = RecordStore()
    store.apply([])
    assert len(store) == 0


def test_clear_empties_snapshot_immediately():
    store = RecordStore()
    store.apply([AddressBinding.from_address("10.0.0.5", "printer.local")])
    assert len(store.snapshot()) == 1
    store.clear()
    assert len(store.snapshot()) == 0


def test_snapshot_is_not_affected_by_later_writes():
    store = RecordStore()
    store.apply([AddressBinding.from_address("10.0.0.5", "a")])
    snapshot = store.snapshot()
    store.apply([AddressBinding.from_address("10.0.0.9", "a")])
    store.clear()
    assert snapshot.lookup("a").ipv4 == IPv4Address("10.0.0.5")


def test_reader_never_sees_partial_batch():
    """Every batch writes the same generation number into the host's v4 and v6 slot."""
    store = RecordStore()
    stop = threading.Event()
    torn: list[tuple] = []

    def writer():
        for generation in range(1, 3000):
            store.apply([
                AddressBinding.from_address(IPv4Address(generation), "host.local"),
                AddressBinding.from_address(IPv6Address(generation), "host.local"),
            ])
        stop.set()

    def reader():
        while not stop.is_set():
            ipv4, ipv6 = store.snapshot().lookup("host.local")
            if (ipv4 is None) != (ipv6 is None):
                torn.append((ipv4, ipv6))
            elif ipv4 is not None and int(ipv4) != int(ipv6):
                torn.append((ipv4, ipv6))

    threads = [threading.Thread(target=writer), threading.Thread(target=reader)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert torn == []
    assert store.snapshot().lookup("host.local").ipv4 == IPv4Address(2999)

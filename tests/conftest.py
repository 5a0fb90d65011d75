"""Pytest configuration and fixtures for mdns-scanner tests."""
import asyncio
import ipaddress

import pytest

from mdns_scanner.config import DiscoveryConfig
from mdns_scanner.discovery.controller import ScanController
from mdns_scanner.discovery.session import AnswerRecord, DiscoveryResponse
from mdns_scanner.exceptions import SessionOpenError
from mdns_scanner.models.common import RecordKind
from mdns_scanner.store import RecordStore


def make_response(*records: AnswerRecord) -> DiscoveryResponse:
    return DiscoveryResponse(list(records))


def a_record(host: str, address: str) -> AnswerRecord:
    return AnswerRecord(RecordKind.A, host, ipaddress.ip_address(address).packed)


def aaaa_record(host: str, address: str) -> AnswerRecord:
    return AnswerRecord(RecordKind.AAAA, host, ipaddress.ip_address(address).packed)


@pytest.fixture
def response():
    """Builds a DiscoveryResponse from (kind, host, address) answer records."""
    return make_response


@pytest.fixture
def records():
    """Answer record builders."""
    class Builders:
        a = staticmethod(a_record)
        aaaa = staticmethod(aaaa_record)

        @staticmethod
        def other(host: str) -> AnswerRecord:
            return AnswerRecord(RecordKind.OTHER, host)

    return Builders


# --- Fake discovery collaborator ---
@pytest.fixture
def FakeSession():
    """A discovery session fed by the test. aclose() sets `closed`."""
    class Session:
        def __init__(self, responses=(), *, finite: bool = False):
            self._queue: asyncio.Queue = asyncio.Queue()
            for item in responses:
                self._queue.put_nowait(item)
            self.finite = finite # Stream ends once the queue is drained
            self.closed = False
            self.close_calls = 0

        def push(self, item) -> None:
            self._queue.put_nowait(item)

        async def responses(self):
            while True:
                if self.finite and self._queue.empty():
                    return
                yield await self._queue.get()

        async def aclose(self) -> None:
            self.closed = True
            self.close_calls += 1

    return Session


@pytest.fixture
def FakeSessionFactory(FakeSession):
    """Session factory recording every open; queries listed in `failing` raise SessionOpenError."""
    class Factory:
        def __init__(self):
            self.opened: list[tuple[str, object]] = []
            self.prepared: dict[str, list] = {}
            self.failing: set[str] = set()

        def prepare(self, query: str, session) -> None:
            self.prepared.setdefault(query, []).append(session)

        async def __call__(self, query: str):
            if query in self.failing:
                raise SessionOpenError(query, "invalid service type")
            queued = self.prepared.get(query)
            session = queued.pop(0) if queued else FakeSession()
            self.opened.append((query, session))
            return session

        def sessions_for(self, query: str) -> list:
            return [session for opened_query, session in self.opened if opened_query == query]

    return Factory
# --- End fake discovery collaborator ---


@pytest.fixture
def discovery_config():
    return DiscoveryConfig(cancel_timeout_seconds=1.0)


@pytest.fixture
def store():
    return RecordStore()


@pytest.fixture
def session_factory(FakeSessionFactory):
    return FakeSessionFactory()


@pytest.fixture
def controller(store, session_factory, discovery_config):
    return ScanController(store, session_factory, discovery_config)


@pytest.fixture
def wait_until():
    """Polls a predicate on the event loop until it holds or the timeout passes."""
    async def _wait(predicate, timeout: float = 1.0) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not predicate():
            if loop.time() > deadline:
                raise AssertionError("condition not met in time")
            await asyncio.sleep(0.005)
    return _wait

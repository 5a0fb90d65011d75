"""
Discovery sessions: a live stream of mDNS responses for one service type.

The wire protocol (packet codec, caching, TTLs) is handled by the zeroconf
library. A session registers a record listener on an AsyncZeroconf instance,
re-sends a PTR query for the service type at a fixed interval and turns each
incoming packet that concerns the service type into one DiscoveryResponse.
"""
import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import NamedTuple, Optional, Protocol

import structlog  # type: ignore[import-not-found]
from zeroconf import (  # type: ignore[import-not-found]
    BadTypeInNameException,
    DNSAddress,
    DNSOutgoing,
    DNSQuestion,
    DNSRecord,
    InterfaceChoice,
    IPVersion,
    NotRunningException,
    RecordUpdate,
    RecordUpdateListener,
    Zeroconf,
    service_type_name,
)
from zeroconf.asyncio import AsyncZeroconf  # type: ignore[import-not-found]
from zeroconf.const import _CLASS_IN, _FLAGS_QR_QUERY, _TYPE_A, _TYPE_AAAA, _TYPE_PTR  # type: ignore[import-not-found]

from ..config import DiscoveryConfig
from ..exceptions import SessionOpenError
from ..models.common import RecordKind

logger = structlog.get_logger(__name__)

_IP_VERSIONS = {
    "all": IPVersion.All,
    "v4": IPVersion.V4Only,
    "v6": IPVersion.V6Only,
}

_RECORD_KINDS = {
    _TYPE_A: RecordKind.A,
    _TYPE_AAAA: RecordKind.AAAA,
}


class AnswerRecord(NamedTuple):
    kind: RecordKind
    host_name: str
    address: Optional[bytes] = None


class DiscoveryResponse:
    """The answer records carried by one incoming mDNS packet."""

    def __init__(self, records: list[AnswerRecord]):
        self._records = records

    def answer_records(self) -> list[AnswerRecord]:
        return list(self._records)

    def __repr__(self) -> str:
        return f"<DiscoveryResponse records={len(self._records)}>"


class DiscoverySession(Protocol):
    def responses(self) -> AsyncIterator[DiscoveryResponse]: ...

    async def aclose(self) -> None: ...


SessionFactory = Callable[[str], Awaitable[DiscoverySession]]


def normalize_service_type(query: str) -> str:
    """'_http._tcp.local' -> '_http._tcp.local.'"""
    query = query.strip()
    if query and not query.endswith("."):
        query += "."
    return query


def _host_name(name: str) -> str:
    return name[:-1] if name.endswith(".") else name


def to_answer_record(record: DNSRecord) -> AnswerRecord:
    kind = _RECORD_KINDS.get(record.type, RecordKind.OTHER)
    address = record.address if isinstance(record, DNSAddress) else None
    return AnswerRecord(kind=kind, host_name=_host_name(record.name), address=address)


class ZeroconfDiscoverySession(RecordUpdateListener):
    """
    One discovery session on top of AsyncZeroconf. Not restartable: once
    closed, open a new session to listen again.
    """

    def __init__(self, aiozc: AsyncZeroconf, service_type: str, config: DiscoveryConfig):
        super().__init__()
        self.service_type = service_type
        self._aiozc = aiozc
        self._query_interval = config.query_interval_seconds
        self._queue: asyncio.Queue[DiscoveryResponse] = asyncio.Queue(maxsize=config.response_queue_size)
        self._loop = asyncio.get_running_loop()
        self._query_task: Optional[asyncio.Task] = None
        self._closed = False
        self.logger = logger.bind(service_type=service_type)

    def start(self) -> None:
        self._aiozc.zeroconf.async_add_listener(self, None)
        self._query_task = asyncio.create_task(self._query_loop())
        self.logger.info("Discovery session started", query_interval=self._query_interval)

    async def _query_loop(self) -> None:
        while True:
            self._send_query()
            await asyncio.sleep(self._query_interval)

    def _send_query(self) -> None:
        out = DNSOutgoing(_FLAGS_QR_QUERY)
        out.add_question(DNSQuestion(self.service_type, _TYPE_PTR, _CLASS_IN))
        self._aiozc.zeroconf.async_send(out)
        self.logger.debug("Sent PTR query")

    def _concerns_service(self, records: list[DNSRecord]) -> bool:
        suffix = "." + self.service_type.lower()
        for record in records:
            name = record.name.lower()
            if name == self.service_type.lower() or name.endswith(suffix):
                return True
        return False

    def async_update_records(self, zc: Zeroconf, now: float, records: list[RecordUpdate]) -> None:
        """Called by zeroconf with every record update of one incoming packet."""
        fresh = [update.new for update in records if update.new.ttl > 0]
        if not fresh or not self._concerns_service(fresh):
            return
        response = DiscoveryResponse([to_answer_record(record) for record in fresh])
        self._loop.call_soon_threadsafe(self._enqueue, response)

    def _enqueue(self, response: DiscoveryResponse) -> None:
        if self._closed:
            return
        if self._queue.full():
            self._queue.get_nowait()
            self.logger.debug("Response queue full, dropped oldest response")
        self._queue.put_nowait(response)

    async def responses(self) -> AsyncIterator[DiscoveryResponse]:
        while True:
            yield await self._queue.get()

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._query_task is not None:
            self._query_task.cancel()
            await asyncio.gather(self._query_task, return_exceptions=True)
        self._aiozc.zeroconf.async_remove_listener(self)
        await self._aiozc.async_close()
        self.logger.info("Discovery session closed")


async def open_zeroconf_session(query: str, config: DiscoveryConfig) -> ZeroconfDiscoverySession:
    """
    Opens a session for a service-type query.

    Raises:
        SessionOpenError: the query is not a valid service type, no mDNS
            socket could be opened, or the zeroconf engine failed to start.
    """
    service_type = normalize_service_type(query)
    try:
        service_type_name(service_type, strict=False)
    except BadTypeInNameException as e:
        raise SessionOpenError(query, str(e) or "invalid service type") from e

    try:
        aiozc = AsyncZeroconf(
            interfaces=config.interfaces or InterfaceChoice.All,
            ip_version=_IP_VERSIONS[config.ip_version],
        )
    except OSError as e:
        raise SessionOpenError(query, f"cannot open mDNS socket: {e}") from e

    # Sockets come up in a background task; a query sent before then is lost.
    try:
        await aiozc.zeroconf.async_wait_for_start()
    except (NotRunningException, OSError) as e:
        await aiozc.async_close()
        raise SessionOpenError(query, f"mDNS engine did not start: {e}") from e

    session = ZeroconfDiscoverySession(aiozc, service_type, config)
    session.start()
    return session


def zeroconf_session_factory(config: DiscoveryConfig) -> SessionFactory:
    """Binds the discovery configuration, leaving the query as the only argument."""
    async def open_session(query: str) -> DiscoverySession:
        return await open_zeroconf_session(query, config)
    return open_session

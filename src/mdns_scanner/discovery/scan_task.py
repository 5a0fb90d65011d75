"""
ScanTask: consumes the response stream of one discovery session and applies
the address bindings it finds to the shared record store.
"""
import asyncio
from typing import Optional

import structlog  # type: ignore[import-not-found]

from ..exceptions import ResponseError, SessionOpenError
from ..models.common import AddressFamily, RecordKind
from ..models.records import AddressBinding
from ..store import RecordStore
from .session import DiscoveryResponse, DiscoverySession, SessionFactory

logger = structlog.get_logger(__name__)

_RECORD_FAMILIES = {
    RecordKind.A: AddressFamily.IPV4,
    RecordKind.AAAA: AddressFamily.IPV6,
}


def bindings_from_response(response: DiscoveryResponse) -> list[AddressBinding]:
    """
    Extracts one binding per A/AAAA answer record; other record kinds are ignored.

    Raises:
        ResponseError: an address record is malformed.
    """
    batch = []
    for record in response.answer_records():
        expected = _RECORD_FAMILIES.get(record.kind)
        if expected is None:
            continue
        try:
            binding = AddressBinding.from_address(record.address, record.host_name)
        except ValueError as e:
            raise ResponseError(f"Malformed {record.kind.value} record: {e}", record_name=record.host_name) from e
        if binding.family is not expected:
            raise ResponseError(
                f"{record.kind.value} record carries an {binding.family.value} address",
                record_name=record.host_name,
            )
        batch.append(binding)
    return batch


class ScanTask:
    """
    One scan generation for a single query. open() must succeed before run();
    run() only ends through cancellation (or a failed session renewal) and
    always closes its session on the way out.
    """

    def __init__(
        self,
        query: str,
        store: RecordStore,
        session_factory: SessionFactory,
        *,
        session_lifetime_seconds: Optional[float] = None,
    ):
        self.query = query
        self._store = store
        self._session_factory = session_factory
        self._session_lifetime = session_lifetime_seconds
        self._session: Optional[DiscoverySession] = None
        self.responses_applied = 0
        self.responses_skipped = 0
        self.logger = logger.bind(query=query)

    async def open(self) -> None:
        """Raises SessionOpenError if the discovery session cannot be opened."""
        self._session = await self._session_factory(self.query)
        self.logger.debug("Discovery session opened")

    async def run(self) -> None:
        if self._session is None:
            raise RuntimeError("ScanTask.run() called before open()")
        self.logger.info("Scan started")
        try:
            while await self._consume(self._session):
                await self._renew_session()
            self.logger.info("Response stream ended")
        except asyncio.CancelledError:
            self.logger.info("Scan cancelled")
            raise
        except SessionOpenError as e:
            self.logger.error("Could not renew discovery session, scan stopped", error=str(e))
        finally:
            await self._close_session()
            self.logger.debug(
                "Scan ended",
                responses_applied=self.responses_applied,
                responses_skipped=self.responses_skipped,
            )

    async def _consume(self, session: DiscoverySession) -> bool:
        """Returns True when the session lifetime elapsed, False when the stream ended on its own."""
        if self._session_lifetime is None:
            await self._consume_stream(session)
            return False
        try:
            await asyncio.wait_for(self._consume_stream(session), timeout=self._session_lifetime)
        except TimeoutError:
            self.logger.debug("Session lifetime elapsed", lifetime=self._session_lifetime)
            return True
        return False

    async def _consume_stream(self, session: DiscoverySession) -> None:
        async for response in session.responses():
            try:
                batch = bindings_from_response(response)
            except ResponseError as e:
                self.responses_skipped += 1
                self.logger.warning("Skipping malformed response", error=str(e), record_name=e.record_name)
                continue
            self._store.apply(batch)
            self.responses_applied += 1

    async def _renew_session(self) -> None:
        await self._close_session()
        self._session = await self._session_factory(self.query)
        self.logger.info("Discovery session renewed")

    async def close(self) -> None:
        """Releases the session if run() never got to do it (e.g. cancelled before its first step)."""
        await self._close_session()

    async def _close_session(self) -> None:
        session, self._session = self._session, None
        if session is None:
            return
        try:
            await session.aclose()
        except Exception as e:
            self.logger.exception("Error closing discovery session", error=str(e))

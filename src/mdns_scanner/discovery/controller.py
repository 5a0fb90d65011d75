"""
ScanController: owns the single live scan and replaces it wholesale on restart.
"""
import asyncio
from typing import Optional

import structlog  # type: ignore[import-not-found]

from ..config import DiscoveryConfig
from ..exceptions import CancellationTimeoutError
from ..store import RecordStore
from .scan_task import ScanTask
from .session import SessionFactory

logger = structlog.get_logger(__name__)


class ScanController:
    """
    Keeps at most one ScanTask alive. start() fully retires the previous scan
    (cancelled, awaited, session released) before the store is cleared and
    the next scan is launched, so two scan generations never write concurrently.
    """

    def __init__(self, store: RecordStore, session_factory: SessionFactory, config: DiscoveryConfig):
        self._store = store
        self._session_factory = session_factory
        self._config = config
        self._scan: Optional[ScanTask] = None
        self._task: Optional[asyncio.Task] = None
        self.logger = logger.bind(component="ScanController")

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def query(self) -> Optional[str]:
        """Query of the current scan generation, if any."""
        return self._scan.query if self._scan is not None else None

    async def start(self, query: str) -> None:
        """
        Restarts scanning for `query`.

        Raises:
            SessionOpenError: the discovery session could not be opened. No
                scan is running afterwards and the store stays empty.
            CancellationTimeoutError: the previous scan did not stop in time.
        """
        await self._retire()
        self._store.clear()

        scan = ScanTask(
            query,
            self._store,
            self._session_factory,
            session_lifetime_seconds=self._config.session_lifetime_seconds,
        )
        await scan.open()
        self._scan = scan
        self._task = asyncio.create_task(scan.run(), name=f"mdns-scan:{query}")
        self.logger.info("Scan launched", query=query)

    async def shutdown(self) -> None:
        """Cancels and awaits the current scan. Safe to call more than once."""
        await self._retire()
        self.logger.info("Scan controller shut down")

    async def _retire(self) -> None:
        scan, task = self._scan, self._task
        self._scan, self._task = None, None
        if scan is None or task is None:
            return

        if not task.done():
            task.cancel()
        done, _ = await asyncio.wait({task}, timeout=self._config.cancel_timeout_seconds)
        if not done:
            self.logger.error("Scan task ignored cancellation", query=scan.query, timeout=self._config.cancel_timeout_seconds)
            raise CancellationTimeoutError(scan.query, self._config.cancel_timeout_seconds)

        # A task cancelled before its first step never ran its own cleanup
        await scan.close()

        if not task.cancelled() and task.exception() is not None:
            exc = task.exception()
            self.logger.error("Scan task failed", query=scan.query, error=str(exc), error_type=type(exc).__name__)
        self.logger.debug("Scan retired", query=scan.query)

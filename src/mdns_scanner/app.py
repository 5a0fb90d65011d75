"""
ScannerApp: the viewing/editing state machine that drives the scan controller.
"""
from enum import Enum
from typing import Optional

import structlog  # type: ignore[import-not-found]

from .discovery.controller import ScanController
from .exceptions import SessionOpenError
from .store import RecordStore

logger = structlog.get_logger(__name__)


class Mode(str, Enum):
    VIEWING = "viewing"
    EDITING = "editing"


class AppEvent: # Base class for input events consumed by ScannerApp.handle()
    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"

class EnterEdit(AppEvent):
    pass

class AppendChar(AppEvent):
    def __init__(self, char: str):
        self.char = char

    def __repr__(self) -> str:
        return f"<AppendChar char={self.char!r}>"

class DeleteChar(AppEvent):
    pass

class Commit(AppEvent):
    pass

class Quit(AppEvent):
    pass


class ScannerApp:
    """
    Holds the query and the viewing/editing mode.

    Viewing --EnterEdit--> Editing --AppendChar/DeleteChar--> Editing
    Editing --Commit--> Viewing (restarts the scan)
    Viewing --Quit--> exited (after the scan controller shut down)
    """

    def __init__(self, controller: ScanController, store: RecordStore, initial_query: Optional[str] = None):
        self.controller = controller
        self.store = store
        self.query = initial_query or ""
        self.mode = Mode.VIEWING if initial_query else Mode.EDITING
        self.status: Optional[str] = None
        self.exited = False
        self.logger = logger.bind(component="ScannerApp")

    @property
    def editing(self) -> bool:
        return self.mode is Mode.EDITING

    async def startup(self) -> None:
        """Starts scanning right away when a query was supplied on startup."""
        if self.mode is Mode.VIEWING:
            await self._start_scan()

    async def handle(self, event: AppEvent) -> None:
        if self.exited:
            return
        if self.mode is Mode.VIEWING:
            if isinstance(event, EnterEdit):
                self.mode = Mode.EDITING
            elif isinstance(event, Quit):
                await self.shutdown()
        else:
            if isinstance(event, AppendChar):
                self.query += event.char
            elif isinstance(event, DeleteChar):
                self.query = self.query[:-1]
            elif isinstance(event, Commit):
                self.mode = Mode.VIEWING
                await self._start_scan()

    async def shutdown(self) -> None:
        """Stops any running scan, then marks the app as exited."""
        if self.exited:
            return
        await self.controller.shutdown()
        self.exited = True
        self.logger.info("Application exited")

    async def _start_scan(self) -> None:
        self.status = None
        try:
            await self.controller.start(self.query)
        except SessionOpenError as e:
            self.status = str(e)
            self.logger.warning("Scan could not start", query=self.query, error=e.reason)

    def display_query(self) -> str:
        return f"{self.query}_" if self.editing else self.query

    def rows(self, placeholder: str = "Not found") -> list[tuple[str, str, str]]:
        """One (host, ipv4, ipv6) row per discovered host, read from a single snapshot."""
        bindings = self.store.snapshot()
        rows = []
        for host in bindings.distinct_host_names():
            ipv4, ipv6 = bindings.lookup(host)
            rows.append((
                host,
                str(ipv4) if ipv4 is not None else placeholder,
                str(ipv6) if ipv6 is not None else placeholder,
            ))
        return rows

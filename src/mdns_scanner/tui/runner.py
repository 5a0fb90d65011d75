"""
Foreground loop: render, poll the keyboard, dispatch events, repeat.
"""
import asyncio
from typing import Optional

import structlog  # type: ignore[import-not-found]
from rich.console import Console
from rich.live import Live

from ..app import ScannerApp
from ..config import Config, UIConfig
from ..discovery.controller import ScanController
from ..discovery.session import zeroconf_session_factory
from ..store import RecordStore
from .keys import RawKeyReader, key_to_event
from .render import build_view

logger = structlog.get_logger(__name__)


async def run_tui(app: ScannerApp, ui_config: UIConfig, console: Optional[Console] = None) -> None:
    """
    Starts the app, then runs until it exits. The scan controller is shut
    down on every exit path, including cancellation by Ctrl+C.
    """
    console = console or Console()
    placeholder = ui_config.not_found_placeholder
    try:
        await app.startup()
        with RawKeyReader() as reader, Live(
            build_view(app, placeholder), console=console, auto_refresh=False, screen=True
        ) as live:
            while not app.exited:
                live.update(build_view(app, placeholder), refresh=True)
                for key in reader.read_keys(0):
                    event = key_to_event(key, app.mode)
                    if event is not None:
                        logger.debug("Dispatching input event", input_event=repr(event))
                        await app.handle(event)
                await asyncio.sleep(ui_config.tick_seconds)
    finally:
        await app.shutdown()


async def run_scanner(config: Config, initial_query: Optional[str] = None, console: Optional[Console] = None) -> None:
    """Wires store, controller and app together and runs the terminal UI."""
    store = RecordStore()
    controller = ScanController(store, zeroconf_session_factory(config.discovery), config.discovery)
    app = ScannerApp(controller, store, initial_query=initial_query)
    logger.info("Starting mDNS scanner", initial_query=initial_query)
    await run_tui(app, config.ui, console)

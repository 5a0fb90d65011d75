"""
Discovery for the mDNS scanner: zeroconf-backed sessions, the scan task that
consumes them and the controller that owns the live scan.
"""
from .controller import ScanController
from .scan_task import ScanTask, bindings_from_response
from .session import (
    AnswerRecord,
    DiscoveryResponse,
    DiscoverySession,
    SessionFactory,
    ZeroconfDiscoverySession,
    open_zeroconf_session,
    zeroconf_session_factory,
)

__all__ = [
    "AnswerRecord",
    "DiscoveryResponse",
    "DiscoverySession",
    "ScanController",
    "ScanTask",
    "SessionFactory",
    "ZeroconfDiscoverySession",
    "bindings_from_response",
    "open_zeroconf_session",
    "zeroconf_session_factory",
]  # type: list[str]

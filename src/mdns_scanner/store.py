"""
Concurrency-safe record store shared between the scan task (writer) and the
renderer (reader).
"""
import threading
from collections.abc import Iterable

import structlog

from .models.records import AddressBinding, BindingSet

logger = structlog.get_logger(__name__)


class RecordStore:
    """
    Wraps a BindingSet behind a lock. Every method is synchronous, so the
    lock is never held across a suspension point.
    """

    def __init__(self) -> None:
        self._bindings = BindingSet()
        self._lock = threading.Lock()

    def apply(self, batch: Iterable[AddressBinding]) -> None:
        """Merges a batch atomically: a concurrent snapshot() sees all of it or none of it."""
        batch = list(batch)
        if not batch:
            return
        with self._lock:
            self._bindings.merge(batch)
            size = len(self._bindings)
        logger.debug("Applied binding batch", batch_size=len(batch), store_size=size)

    def snapshot(self) -> BindingSet:
        with self._lock:
            return self._bindings.copy()

    def clear(self) -> None:
        with self._lock:
            self._bindings.clear()
        logger.debug("Record store cleared")

    def __len__(self) -> int:
        with self._lock:
            return len(self._bindings)

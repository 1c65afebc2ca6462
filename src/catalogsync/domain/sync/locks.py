"""Per-vendor mutual exclusion for apply runs."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import TYPE_CHECKING

from catalogsync.domain.errors import SyncError

if TYPE_CHECKING:
    from collections.abc import Iterator


class VendorLockTimeoutError(SyncError):
    def __init__(self, vendor: str, timeout: float) -> None:
        super().__init__(f"Another apply for '{vendor}' is still running after {timeout:.1f}s")
        self.vendor = vendor


class VendorLocks:
    """One lock per vendor slug; applies for different vendors run in parallel."""

    def __init__(self, *, timeout: float | None = None) -> None:
        self._timeout = timeout
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def _lock_for(self, vendor: str) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(vendor, threading.Lock())

    @contextmanager
    def hold(self, vendor: str, *, timeout: float | None = None) -> Iterator[None]:
        """Hold the lock of ``vendor``; ``timeout`` overrides the registry default."""

        wait = timeout if timeout is not None else self._timeout
        lock = self._lock_for(vendor)
        acquired = lock.acquire(timeout=-1 if wait is None else wait)
        if not acquired:
            raise VendorLockTimeoutError(vendor, wait or 0.0)
        try:
            yield
        finally:
            lock.release()

    def locked(self, vendor: str) -> bool:
        return self._lock_for(vendor).locked()

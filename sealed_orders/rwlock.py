"""Read-write lock guarding the order store."""

import threading
import time
from contextlib import contextmanager
from typing import Callable, Optional

from .errors import LedgerUnavailableError


class RWLock:
    """
    Writer-preferring read-write lock.

    Any number of readers may hold the lock together; a writer holds it
    alone. Waiting writers block new readers so that verification and
    creation are not starved by dashboard reads.

    Args:
        timeout: Default number of seconds to wait for the lock
            (None waits forever)
    """

    def __init__(self, timeout: Optional[float] = None):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writers_waiting = 0
        self._writer_active = False
        self.timeout = timeout

    def _wait_for(self, ready: Callable[[], bool], timeout: Optional[float]) -> bool:
        """Wait on the condition until `ready()` holds. Caller must hold `_cond`."""
        if timeout is None:
            self._cond.wait_for(ready)
            return True
        deadline = time.monotonic() + timeout
        while not ready():
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return False
            self._cond.wait(timeout=remaining)
        return True

    def acquire_read(self, timeout: Optional[float] = None) -> bool:
        """Acquire a shared hold. Returns False on timeout."""
        with self._cond:
            ok = self._wait_for(
                lambda: not self._writer_active and self._writers_waiting == 0,
                timeout,
            )
            if ok:
                self._readers += 1
            return ok

    def release_read(self) -> None:
        with self._cond:
            self._readers -= 1
            if self._readers == 0:
                self._cond.notify_all()

    def acquire_write(self, timeout: Optional[float] = None) -> bool:
        """Acquire the exclusive hold. Returns False on timeout."""
        with self._cond:
            self._writers_waiting += 1
            try:
                ok = self._wait_for(
                    lambda: self._readers == 0 and not self._writer_active,
                    timeout,
                )
                if ok:
                    self._writer_active = True
                return ok
            finally:
                self._writers_waiting -= 1
                if not self._writer_active:
                    # Readers held back by this writer may proceed again
                    self._cond.notify_all()

    def release_write(self) -> None:
        with self._cond:
            self._writer_active = False
            self._cond.notify_all()

    @contextmanager
    def read(self, timeout: Optional[float] = None):
        """
        Context manager for a shared hold.

        Raises:
            LedgerUnavailableError: If the lock is not obtained in time
        """
        if not self.acquire_read(self.timeout if timeout is None else timeout):
            raise LedgerUnavailableError("Timed out waiting for ledger read access")
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write(self, timeout: Optional[float] = None):
        """
        Context manager for the exclusive hold.

        Raises:
            LedgerUnavailableError: If the lock is not obtained in time
        """
        if not self.acquire_write(self.timeout if timeout is None else timeout):
            raise LedgerUnavailableError("Timed out waiting for ledger write access")
        try:
            yield
        finally:
            self.release_write()

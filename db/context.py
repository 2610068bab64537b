"""
db/context.py
-------------
Per-call execution context carrying a deadline and a cancellation flag.

The HTTP layer creates one QueryContext per request and passes it down
through services and repositories to the Database, which checks it before
every round trip, turns the remaining time into a statement timeout and
asks the server to abort a running statement when the context is cancelled.
"""

import threading
import time
from typing import Callable, Optional

from utils.errors import OperationCancelled


class QueryContext:
    """
    Cancellation/deadline carrier for a single request.

    Args:
        timeout: Seconds from now until the deadline, or None for no deadline.
    """

    def __init__(self, timeout: Optional[float] = None):
        self._cancelled = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []
        self._deadline: Optional[float] = (
            time.monotonic() + timeout if timeout is not None else None
        )

    def cancel(self) -> None:
        """
        Mark the context cancelled and fire every registered callback.
        Safe to call from any thread.
        """
        with self._lock:
            self._cancelled.set()
            # under the lock so a callback never outlives its unregistration
            for callback in self._callbacks:
                callback()

    def on_cancel(self, callback: Callable[[], None]) -> None:
        """
        Run ``callback`` when the context is cancelled, or right away if it
        already is. Used to interrupt a statement that is in flight.
        """
        with self._lock:
            if not self._cancelled.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def remove_cancel_callback(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline (never negative), or None."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    def check(self, operation: str = "operation") -> None:
        """
        Raise if the caller no longer wants the result.

        Raises:
            OperationCancelled: If cancelled or past the deadline.
        """
        if self.cancelled:
            raise OperationCancelled(f"{operation} cancelled")
        if self.expired():
            raise OperationCancelled(f"{operation} deadline exceeded")

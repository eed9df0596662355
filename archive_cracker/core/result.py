"""
Single-winner result latch shared by the producer and every worker.
"""

import threading
from typing import Optional


class ResultBroadcaster:
    """Latches the first success or fatal error and cancels the search

    Only the first report is kept. Workers poll ``cancelled`` between
    candidates; the producer checks it while waiting on a full queue.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._cancelled = threading.Event()
        self._password: Optional[bytes] = None
        self._error: Optional[BaseException] = None

    def publish(self, candidate: bytes) -> bool:
        """Report a successful candidate

        Returns:
            True if this call won the latch
        """
        with self._lock:
            if self._cancelled.is_set():
                return False
            self._password = candidate
            self._cancelled.set()
            return True

    def fail(self, error: BaseException) -> bool:
        """Report a fatal error, stopping the search unless it is already over"""
        with self._lock:
            if self._cancelled.is_set():
                return False
            self._error = error
            self._cancelled.set()
            return True

    def cancel(self) -> None:
        """Stop the search without reporting a result"""
        with self._lock:
            self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until a result is latched or the timeout expires"""
        return self._cancelled.wait(timeout)

    @property
    def password(self) -> Optional[bytes]:
        return self._password

    @property
    def error(self) -> Optional[BaseException]:
        return self._error

    def result(self) -> Optional[bytes]:
        """The found password, None if nothing was found, or the fatal error raised"""
        if self._error is not None:
            raise self._error
        return self._password

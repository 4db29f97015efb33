"""One-shot cancellation token shared between a session and its caller."""

from __future__ import annotations

import threading
from typing import Optional


class CancellationToken:
    """Event-backed token; cancelling more than once is a no-op."""

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.Lock()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> bool:
        """Signal cancellation. Returns True only for the call that fired it."""
        with self._lock:
            if self._event.is_set():
                return False
            self._event.set()
            return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until cancelled or `timeout` elapses; True when cancelled."""
        return self._event.wait(timeout)

"""Small threading helpers: one-time initialisation, thread start and timed waits."""

from __future__ import annotations

import threading
from collections.abc import Callable


class Once:
    """Runs an initialisation routine exactly once, even across threads."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._done = False

    def run(self, routine: Callable[[], object]) -> None:
        """Call ``routine`` unless a previous call already completed."""
        if self._done:
            return
        with self._lock:
            if not self._done:
                routine()
                self._done = True


def start_thread(func: Callable[..., object], *args) -> threading.Thread:
    """Start ``func(*args)`` in a new joinable thread and return it."""
    thread = threading.Thread(target=func, args=args)
    thread.start()
    return thread


def thread_alive(thread: threading.Thread | None) -> bool:
    """Return whether ``thread`` exists and is still running."""
    if thread is None:
        return False
    return thread.is_alive()


def cond_wait_timeout(cond: threading.Condition, timeout_ms: int) -> bool:
    """Wait on ``cond`` (whose lock must be held) for up to ``timeout_ms`` ms.

    Returns True if woken by a notification, False on timeout.
    """
    if timeout_ms < 0:
        raise ValueError("timeout must not be negative")
    return cond.wait(timeout_ms / 1000)
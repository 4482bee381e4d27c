"""
Readiness of a local wrapper: loading -> ready, or loading -> failed.

Continuations submitted while loading are queued in arrival order and run once
when the state settles. Those submitted while the queue is draining are queued
behind it, so no call is reordered or dropped.
"""

from __future__ import annotations

import threading
from collections import deque
from typing import Callable

from mlclient.client_logging import get_logger

logger = get_logger(__name__)

LOADING = "loading"
READY = "ready"
FAILED = "failed"


class Readiness:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._state = LOADING
        self._draining = False
        self._drain_thread: int | None = None
        self._error: BaseException | None = None
        self._pending: deque[Callable[[], None]] = deque()
        self._settled = threading.Event()

    @property
    def state(self) -> str:
        return self._state

    @property
    def error(self) -> BaseException | None:
        return self._error

    def submit(self, continuation: Callable[[], None]) -> bool:
        """Queue continuation if not settled yet. False means: run it yourself, now."""
        with self._lock:
            if self._state == LOADING or self._draining:
                self._pending.append(continuation)
                return True
        return False

    def add_listener(self, listener: Callable[[], None]) -> None:
        """Call listener once when the state becomes ready (at once if it already is)."""

        def _notify() -> None:
            if self._state == READY:
                listener()

        if not self.submit(_notify):
            _notify()

    def mark_ready(self) -> None:
        self._settle(READY)

    def mark_failed(self, error: BaseException) -> None:
        self._settle(FAILED, error)

    def _settle(self, state: str, error: BaseException | None = None) -> None:
        with self._lock:
            if self._state != LOADING:
                raise RuntimeError(f"Readiness already settled as {self._state}")
            self._state = state
            self._error = error
            self._draining = True
            self._drain_thread = threading.get_ident()
        while True:
            with self._lock:
                if not self._pending:
                    self._draining = False
                    self._drain_thread = None
                    self._settled.set()
                    return
                batch = list(self._pending)
                self._pending.clear()
            for continuation in batch:
                try:
                    continuation()
                except Exception:
                    logger.exception("local_resource_replay_failed", state=state)

    def wait(self, timeout: float | None = None) -> bool:
        """
        Block until settled and drained; False on timeout.

        Continuations running in the drain see the settled state at once.
        """
        if self._drain_thread == threading.get_ident():
            return True
        return self._settled.wait(timeout)

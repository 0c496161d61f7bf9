"""
shopledger.session.timer

Sliding-expiration session timer.

Responsibilities:
- Schedule exactly one timeout callback per `start`/`reset`.
- Cancel idempotently.

One instance is owned by each controller, so independent sessions (e.g. in tests) never
share a countdown.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable

from shopledger.observability.logging import get_logger

log = get_logger(__name__)

DEFAULT_SESSION_TIMEOUT_SECONDS = 30 * 60


class SessionTimer:
    def __init__(self, timeout_seconds: float = DEFAULT_SESSION_TIMEOUT_SECONDS) -> None:
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        self._timeout_seconds = float(timeout_seconds)
        self._handle: asyncio.TimerHandle | None = None

    @property
    def timeout_seconds(self) -> float:
        return self._timeout_seconds

    @timeout_seconds.setter
    def timeout_seconds(self, value: float) -> None:
        # Applies from the next start/reset; a running countdown keeps its deadline.
        if value <= 0:
            raise ValueError("timeout_seconds must be positive")
        self._timeout_seconds = float(value)

    @property
    def active(self) -> bool:
        return self._handle is not None

    def start(self, on_timeout: Callable[[], None]) -> None:
        self.clear()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self._timeout_seconds, self._fire, on_timeout)

    def reset(self, on_timeout: Callable[[], None]) -> None:
        self.clear()
        self.start(on_timeout)

    def clear(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, on_timeout: Callable[[], None]) -> None:
        self._handle = None
        log.info("session_timer_fired", timeout_seconds=self._timeout_seconds)
        on_timeout()


# --- Module Notes -----------------------------------------------------------
# `start` must run on the event loop thread; the controller only calls it from there.

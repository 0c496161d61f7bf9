"""
shopledger.session.activity

User-interaction event sources.

Responsibilities:
- Name the activity kinds that count as "the user is still here".
- Provide a subscribe/unsubscribe source hosts can feed (`LocalActivitySource.emit`).
"""

from __future__ import annotations

import enum
from collections.abc import Callable, Iterable


class ActivityKind(enum.StrEnum):
    pointer_down = "pointer_down"
    pointer_move = "pointer_move"
    key_down = "key_down"
    scroll = "scroll"
    touch_start = "touch_start"


SESSION_ACTIVITY_KINDS: frozenset[ActivityKind] = frozenset(ActivityKind)

ActivityCallback = Callable[[ActivityKind], None]
Unsubscribe = Callable[[], None]


class ActivitySource:
    def subscribe(self, kinds: Iterable[ActivityKind], callback: ActivityCallback) -> Unsubscribe:
        raise NotImplementedError


class LocalActivitySource(ActivitySource):
    """In-process fan-out; the host UI (or a test) calls `emit` on each interaction."""

    def __init__(self) -> None:
        self._listeners: list[tuple[frozenset[ActivityKind], ActivityCallback]] = []

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def subscribe(self, kinds: Iterable[ActivityKind], callback: ActivityCallback) -> Unsubscribe:
        entry = (frozenset(kinds), callback)
        self._listeners.append(entry)

        def _unsubscribe() -> None:
            if entry in self._listeners:
                self._listeners.remove(entry)

        return _unsubscribe

    def emit(self, kind: ActivityKind | str) -> None:
        kind = ActivityKind(kind)
        for kinds, callback in list(self._listeners):
            if kind in kinds:
                callback(kind)

"""
tests.test_session_timer

Sliding-expiration timer and the activity source.
"""

from __future__ import annotations

import asyncio

import pytest

from shopledger.session.activity import ActivityKind, LocalActivitySource
from shopledger.session.timer import SessionTimer


@pytest.mark.asyncio
async def test_timer_fires_once_after_timeout() -> None:
    fired: list[int] = []
    timer = SessionTimer(0.02)
    timer.start(lambda: fired.append(1))
    assert timer.active

    await asyncio.sleep(0.06)
    assert fired == [1]
    assert not timer.active


@pytest.mark.asyncio
async def test_reset_pushes_deadline_forward() -> None:
    fired: list[int] = []
    timer = SessionTimer(0.05)
    timer.start(lambda: fired.append(1))

    for _ in range(3):
        await asyncio.sleep(0.03)
        timer.reset(lambda: fired.append(1))
    assert fired == []

    await asyncio.sleep(0.08)
    assert fired == [1]


@pytest.mark.asyncio
async def test_clear_is_idempotent_and_cancels() -> None:
    fired: list[int] = []
    timer = SessionTimer(0.02)
    timer.start(lambda: fired.append(1))
    timer.clear()
    timer.clear()

    await asyncio.sleep(0.05)
    assert fired == []


@pytest.mark.asyncio
async def test_restart_replaces_pending_countdown() -> None:
    fired: list[str] = []
    timer = SessionTimer(0.02)
    timer.start(lambda: fired.append("first"))
    timer.start(lambda: fired.append("second"))

    await asyncio.sleep(0.06)
    assert fired == ["second"]


def test_timeout_must_be_positive() -> None:
    with pytest.raises(ValueError):
        SessionTimer(0)
    timer = SessionTimer(1)
    with pytest.raises(ValueError):
        timer.timeout_seconds = -1


def test_activity_source_filters_kinds_and_unsubscribes() -> None:
    source = LocalActivitySource()
    seen: list[ActivityKind] = []
    unsubscribe = source.subscribe({ActivityKind.key_down}, seen.append)

    source.emit("scroll")
    source.emit(ActivityKind.key_down)
    unsubscribe()
    unsubscribe()
    source.emit(ActivityKind.key_down)

    assert seen == [ActivityKind.key_down]
    assert source.listener_count == 0


# --- Module Notes -----------------------------------------------------------
# Each test owns its timer; nothing is shared across the loop.

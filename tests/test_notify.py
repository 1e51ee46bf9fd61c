from __future__ import annotations

import asyncio
from collections.abc import Callable

import pytest

from mtxwatch.state.notify import CoalescingNotifier


class _Timer:
    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class _ManualScheduler:
    """Records timers instead of arming them; tests fire them explicitly."""

    def __init__(self) -> None:
        self.timers: list[_Timer] = []

    def __call__(self, delay: float, callback: Callable[[], None]) -> _Timer:
        timer = _Timer(delay, callback)
        self.timers.append(timer)
        return timer

    def fire(self) -> None:
        for timer in list(self.timers):
            if not timer.cancelled:
                timer.callback()
        self.timers.clear()


def test_burst_of_schedules_delivers_once() -> None:
    scheduler = _ManualScheduler()
    notifier = CoalescingNotifier(0.016, scheduler=scheduler)
    calls: list[int] = []
    notifier.add_listener(lambda: calls.append(1))

    for _ in range(10):
        notifier.schedule()

    assert len(scheduler.timers) == 1
    assert scheduler.timers[0].delay == 0.016
    assert notifier.pending
    scheduler.fire()
    assert calls == [1]
    assert not notifier.pending

    notifier.schedule()
    scheduler.fire()
    assert calls == [1, 1]


def test_listener_fault_is_isolated(caplog: pytest.LogCaptureFixture) -> None:
    scheduler = _ManualScheduler()
    notifier = CoalescingNotifier(0, scheduler=scheduler)
    calls: list[str] = []

    def _broken() -> None:
        raise RuntimeError("listener bug")

    notifier.add_listener(lambda: calls.append("first"))
    notifier.add_listener(_broken)
    notifier.add_listener(lambda: calls.append("last"))

    notifier.schedule()
    scheduler.fire()

    assert calls == ["first", "last"]
    assert "Error in store listener" in caplog.text


def test_unsubscribe_stops_delivery_and_is_idempotent() -> None:
    scheduler = _ManualScheduler()
    notifier = CoalescingNotifier(0, scheduler=scheduler)
    calls: list[int] = []
    unsubscribe = notifier.add_listener(lambda: calls.append(1))

    unsubscribe()
    unsubscribe()
    notifier.schedule()
    scheduler.fire()

    assert calls == []


def test_listener_may_unsubscribe_while_notified() -> None:
    scheduler = _ManualScheduler()
    notifier = CoalescingNotifier(0, scheduler=scheduler)
    calls: list[str] = []
    unsubscribe: Callable[[], None]

    def _once() -> None:
        calls.append("once")
        unsubscribe()

    unsubscribe = notifier.add_listener(_once)
    notifier.add_listener(lambda: calls.append("always"))

    notifier.flush()
    notifier.flush()

    assert calls == ["once", "always", "always"]


def test_cancel_drops_pending_notification() -> None:
    scheduler = _ManualScheduler()
    notifier = CoalescingNotifier(0, scheduler=scheduler)
    calls: list[int] = []
    notifier.add_listener(lambda: calls.append(1))

    notifier.schedule()
    notifier.cancel()
    scheduler.fire()

    assert calls == []
    assert scheduler.timers == []


def test_flush_cancels_armed_timer() -> None:
    scheduler = _ManualScheduler()
    notifier = CoalescingNotifier(0, scheduler=scheduler)
    calls: list[int] = []
    notifier.add_listener(lambda: calls.append(1))

    notifier.schedule()
    timer = scheduler.timers[0]
    notifier.flush()

    assert calls == [1]
    assert timer.cancelled


@pytest.mark.asyncio
async def test_default_scheduler_uses_event_loop() -> None:
    notifier = CoalescingNotifier(0.01)
    delivered = asyncio.Event()
    notifier.add_listener(delivered.set)

    notifier.schedule()
    notifier.schedule()

    await asyncio.wait_for(delivered.wait(), timeout=1)
    assert not notifier.pending

"""Coalescing change notifier.

Store mutations call :meth:`CoalescingNotifier.schedule`. The first call
arms a timer; calls made while it is armed are absorbed, and every
listener runs once when the timer fires (trailing edge). The timer source
is injected, so the notifier does not depend on a particular event loop.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from typing import Protocol

_logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


Scheduler = Callable[[float, Callable[[], None]], TimerHandle]


def asyncio_scheduler(delay: float, callback: Callable[[], None]) -> TimerHandle:
    """Default scheduler: ``call_later`` on the running event loop."""
    return asyncio.get_running_loop().call_later(delay, callback)


class CoalescingNotifier:
    """Deliver at most one notification per ``delay`` window."""

    def __init__(self, delay: float, *, scheduler: Scheduler = asyncio_scheduler) -> None:
        self._delay = delay
        self._scheduler = scheduler
        self._listeners: list[Listener] = []
        self._pending: TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """Register *listener*; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            with contextlib.suppress(ValueError):
                self._listeners.remove(listener)

        return _unsubscribe

    def schedule(self) -> None:
        if self._pending is not None:
            return
        self._pending = self._scheduler(self._delay, self.flush)

    def flush(self) -> None:
        """Deliver now, regardless of the timer."""
        handle = self._pending
        self._pending = None
        if handle is not None:
            handle.cancel()
        # Copy: listeners may unsubscribe while being notified.
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                _logger.exception("Error in store listener %r", listener)

    def cancel(self) -> None:
        """Drop a pending notification without delivering it."""
        handle = self._pending
        self._pending = None
        if handle is not None:
            handle.cancel()

    def clear(self) -> None:
        self.cancel()
        self._listeners.clear()

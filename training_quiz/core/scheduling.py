"""Repeating tick sources for the quiz countdown.

The desktop console ticks from the Qt event loop and the learner API ticks
from the asyncio event loop; both deliver callbacks on the thread that owns
the quiz session, so the engine never needs a lock.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Protocol

from PySide6.QtCore import QObject, QTimer


class TickHandle(Protocol):
    @property
    def active(self) -> bool: ...

    def cancel(self) -> None: ...


class TickScheduler(Protocol):
    def schedule_repeating(self, interval_ms: int, callback: Callable[[], None]) -> TickHandle: ...


class _QtTickHandle:
    def __init__(self, timer: QTimer) -> None:
        self._timer = timer
        self._cancelled = False

    @property
    def active(self) -> bool:
        return not self._cancelled and self._timer.isActive()

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self._timer.stop()
        self._timer.deleteLater()


class QtTickScheduler:
    """Creates one QTimer per countdown, parented to the given Qt object."""

    def __init__(self, parent: QObject | None = None) -> None:
        self._parent = parent

    def schedule_repeating(self, interval_ms: int, callback: Callable[[], None]) -> TickHandle:
        timer = QTimer(self._parent)
        timer.setInterval(interval_ms)
        timer.timeout.connect(callback)
        timer.start()
        return _QtTickHandle(timer)


class _AsyncioTickHandle:
    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        interval_ms: int,
        callback: Callable[[], None],
    ) -> None:
        self._loop = loop
        self._interval = interval_ms / 1000
        self._callback = callback
        self._next_deadline = loop.time() + self._interval
        self._handle: asyncio.TimerHandle | None = loop.call_at(self._next_deadline, self._fire)

    @property
    def active(self) -> bool:
        return self._handle is not None

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        # Schedule against the previous deadline so ticks do not drift.
        self._next_deadline += self._interval
        self._handle = self._loop.call_at(self._next_deadline, self._fire)
        self._callback()


class AsyncioTickScheduler:
    """Schedules ticks on the running asyncio loop; must be used from inside it."""

    def schedule_repeating(self, interval_ms: int, callback: Callable[[], None]) -> TickHandle:
        return _AsyncioTickHandle(asyncio.get_running_loop(), interval_ms, callback)

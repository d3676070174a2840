"""Per-attempt countdown that fires a single expiry at zero."""

from __future__ import annotations

from typing import Callable

from training_quiz.constants.quiz_constants import TICK_INTERVAL_MS
from training_quiz.core.scheduling import TickHandle, TickScheduler


class CountdownTimer:
    """Counts whole seconds down from a time allowance.

    At most one tick handle is alive at a time: ``start`` cancels the
    previous one, and ``stop`` (or expiry) cancels the current one, after
    which no further callbacks run.
    """

    def __init__(
        self,
        scheduler: TickScheduler,
        on_tick: Callable[[int], None] | None = None,
        on_expired: Callable[[], None] | None = None,
        interval_ms: int = TICK_INTERVAL_MS,
    ) -> None:
        self._scheduler = scheduler
        self._on_tick = on_tick
        self._on_expired = on_expired
        self._interval_ms = interval_ms
        self._handle: TickHandle | None = None
        self._remaining_seconds: int | None = None

    @property
    def remaining_seconds(self) -> int | None:
        return self._remaining_seconds

    @property
    def is_running(self) -> bool:
        return self._handle is not None

    def start(self, seconds: int) -> None:
        if seconds <= 0:
            raise ValueError("Countdown length must be a positive number of seconds.")
        self.stop()
        self._remaining_seconds = seconds
        self._handle = self._scheduler.schedule_repeating(self._interval_ms, self._tick)

    def stop(self) -> None:
        """Cancel ticking and forget the remaining time."""
        self._cancel_handle()
        self._remaining_seconds = None

    def _cancel_handle(self) -> None:
        handle, self._handle = self._handle, None
        if handle is not None:
            handle.cancel()

    def _tick(self) -> None:
        if self._handle is None or self._remaining_seconds is None:
            return
        remaining = max(0, self._remaining_seconds - 1)
        self._remaining_seconds = remaining
        if remaining == 0:
            self._cancel_handle()
        if self._on_tick is not None:
            self._on_tick(remaining)
        if remaining == 0 and self._on_expired is not None:
            self._on_expired()

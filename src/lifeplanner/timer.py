"""Pomodoro work/break countdown.

Purely local state: nothing here is persisted or touches the backend.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from enum import StrEnum

from lifeplanner._constants import BREAK_SECONDS, WORK_SECONDS

_logger = logging.getLogger(__name__)


class TimerMode(StrEnum):
    WORK = "work"
    BREAK = "break"

    @property
    def other(self) -> TimerMode:
        return TimerMode.BREAK if self is TimerMode.WORK else TimerMode.WORK


CompletionCallback = Callable[[TimerMode, TimerMode], None]
"""Called as ``on_complete(finished_mode, next_mode)`` when a session ends."""


class PomodoroTimer:
    """Work (25:00) / break (05:00) countdown with a running/paused gate.

    While running, one asyncio task calls :meth:`tick` every *interval*
    seconds. A tick at 00:00 flips the mode, loads the new mode's duration
    and pauses the timer.
    """

    def __init__(
        self,
        *,
        work_seconds: int = WORK_SECONDS,
        break_seconds: int = BREAK_SECONDS,
        interval: float = 1.0,
        on_complete: CompletionCallback | None = None,
    ) -> None:
        self._durations = {TimerMode.WORK: work_seconds, TimerMode.BREAK: break_seconds}
        self._interval = interval
        self._on_complete = on_complete
        self._mode = TimerMode.WORK
        self._remaining = work_seconds
        self._running = False
        self._task: asyncio.Task[None] | None = None

    @property
    def mode(self) -> TimerMode:
        return self._mode

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def remaining(self) -> int:
        """Seconds left in the current session."""
        return self._remaining

    @property
    def minutes(self) -> int:
        return self._remaining // 60

    @property
    def seconds(self) -> int:
        return self._remaining % 60

    @property
    def display(self) -> str:
        return f"{self.minutes:02d}:{self.seconds:02d}"

    @property
    def duration(self) -> int:
        return self._durations[self._mode]

    @property
    def progress(self) -> float:
        """Percent of the current session already elapsed."""
        total = self.duration
        if total <= 0:
            return 100.0
        return (total - self._remaining) / total * 100

    def start(self) -> None:
        """Start counting down. Must be called from a running event loop."""
        if self._running:
            return
        self._running = True
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self._run())

    def pause(self) -> None:
        self._running = False
        task = self._task
        self._task = None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    def reset(self) -> None:
        """Pause and go back to a full work session."""
        self.pause()
        self._mode = TimerMode.WORK
        self._remaining = self._durations[TimerMode.WORK]

    def tick(self) -> None:
        """Advance the countdown by one second (no-op while paused)."""
        if not self._running:
            return
        if self._remaining > 0:
            self._remaining -= 1
            return

        finished = self._mode
        self._mode = finished.other
        self._remaining = self._durations[self._mode]
        self.pause()
        _logger.debug("%s session completed; next is %s", finished, self._mode)
        if self._on_complete is not None:
            try:
                self._on_complete(finished, self._mode)
            except Exception:
                _logger.warning("Timer completion callback failed", exc_info=True)

    async def _run(self) -> None:
        with contextlib.suppress(asyncio.CancelledError):
            while self._running:
                await asyncio.sleep(self._interval)
                self.tick()

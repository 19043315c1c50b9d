from __future__ import annotations

import asyncio

import pytest

from lifeplanner.timer import PomodoroTimer, TimerMode


def test_initial_state_is_a_paused_work_session() -> None:
    timer = PomodoroTimer()

    assert timer.mode == TimerMode.WORK
    assert not timer.is_running
    assert timer.display == "25:00"
    assert timer.progress == 0.0


def test_tick_is_ignored_while_paused() -> None:
    timer = PomodoroTimer(work_seconds=3)

    timer.tick()

    assert timer.remaining == 3


@pytest.mark.asyncio
async def test_countdown_flips_mode_and_pauses_at_zero() -> None:
    completions: list[tuple[TimerMode, TimerMode]] = []
    timer = PomodoroTimer(
        work_seconds=2,
        break_seconds=65,
        interval=3600,
        on_complete=lambda finished, upcoming: completions.append((finished, upcoming)),
    )
    timer.start()

    timer.tick()
    timer.tick()
    assert timer.display == "00:00"
    assert timer.progress == 100.0
    assert timer.is_running

    timer.tick()

    assert timer.mode == TimerMode.BREAK
    assert timer.display == "01:05"
    assert not timer.is_running
    assert completions == [(TimerMode.WORK, TimerMode.BREAK)]

    timer.tick()
    assert timer.remaining == 65


@pytest.mark.asyncio
async def test_failing_completion_callback_is_contained() -> None:
    def broken(_finished: TimerMode, _upcoming: TimerMode) -> None:
        raise RuntimeError("boom")

    timer = PomodoroTimer(work_seconds=0, interval=3600, on_complete=broken)
    timer.start()
    timer.tick()

    assert timer.mode == TimerMode.BREAK


@pytest.mark.asyncio
async def test_reset_returns_to_full_work_session() -> None:
    timer = PomodoroTimer(work_seconds=10, break_seconds=5, interval=3600)
    timer.start()
    timer.tick()
    timer.tick()

    timer.reset()

    assert not timer.is_running
    assert timer.mode == TimerMode.WORK
    assert timer.remaining == 10


@pytest.mark.asyncio
async def test_running_timer_counts_down_in_background() -> None:
    timer = PomodoroTimer(work_seconds=60, interval=0.001)
    timer.start()
    timer.start()

    for _ in range(100):
        if timer.remaining <= 57:
            break
        await asyncio.sleep(0.005)
    timer.pause()
    remaining = timer.remaining
    await asyncio.sleep(0.01)

    assert remaining < 60
    assert timer.remaining == remaining
    assert not timer.is_running

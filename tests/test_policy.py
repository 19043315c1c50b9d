from __future__ import annotations

from datetime import UTC, date, datetime

from lifeplanner.models import Habit
from lifeplanner.state.policy import completed_on, needs_bulk_load, next_streak


def _habit(streak: int, last_completed: date | None) -> Habit:
    return Habit(
        id="h-1",
        user_id="u-1",
        name="Read",
        streak=streak,
        last_completed=last_completed,
        created_at=datetime(2026, 1, 1, tzinfo=UTC),
    )


def test_first_completion_starts_streak() -> None:
    habit = _habit(0, None)

    assert not completed_on(habit, date(2026, 3, 10))
    assert next_streak(habit, date(2026, 3, 10)) == 1


def test_same_day_completion_keeps_streak() -> None:
    habit = _habit(4, date(2026, 3, 10))

    assert completed_on(habit, date(2026, 3, 10))
    assert next_streak(habit, date(2026, 3, 10)) == 4


def test_streak_grows_by_one_after_any_gap() -> None:
    assert next_streak(_habit(4, date(2026, 3, 9)), date(2026, 3, 10)) == 5
    assert next_streak(_habit(4, date(2026, 1, 1)), date(2026, 3, 10)) == 5


def test_bulk_load_only_on_identity_change() -> None:
    assert needs_bulk_load(None, "u-1")
    assert needs_bulk_load("u-1", "u-2")
    assert not needs_bulk_load("u-1", "u-1")
    assert not needs_bulk_load("u-1", None)
    assert not needs_bulk_load(None, None)

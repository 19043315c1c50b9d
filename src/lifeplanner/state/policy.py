"""Deterministic state policy.

Pure functions only: no I/O and no clock reads. Callers pass "today".
"""

from __future__ import annotations

from datetime import date

from lifeplanner.models.habit import Habit


def completed_on(habit: Habit, today: date) -> bool:
    """Whether *habit* was already marked done on *today*."""
    return habit.last_completed == today


def next_streak(habit: Habit, today: date) -> int:
    """Streak after completing *habit* on *today*.

    Re-completing on the same day is a no-op. Any other completion adds
    exactly one, regardless of how long ago the previous completion was.
    """
    if completed_on(habit, today):
        return habit.streak
    return habit.streak + 1


def needs_bulk_load(current_id: str | None, incoming_id: str | None) -> bool:
    """Whether a session change moves the store onto a new identity.

    Token refreshes and repeated notifications for the identity that is
    already loaded must not trigger another bulk load.
    """
    return incoming_id is not None and incoming_id != current_id

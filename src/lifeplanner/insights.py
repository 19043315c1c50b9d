"""Summaries derived from the entity collections.

These back the dashboard, habit tracker, goal planner and task list views.
All functions are pure; pass ``today`` explicitly where dates matter.
"""

from __future__ import annotations

import random
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from enum import StrEnum

from lifeplanner._constants import (
    MOTIVATIONAL_QUOTES,
    STREAK_TIER_AMAZING,
    STREAK_TIER_INCREDIBLE,
    STREAK_TIER_MOMENTUM,
)
from lifeplanner.models.goal import Goal, GoalStep
from lifeplanner.models.habit import Habit
from lifeplanner.models.task import Task, TaskPriority, TaskStatus

# ------------------------------------------------------------------
# Tasks
# ------------------------------------------------------------------


def tasks_due_on(tasks: Iterable[Task], day: date) -> list[Task]:
    return [task for task in tasks if task.due_date == day]


def completed_tasks(tasks: Iterable[Task]) -> list[Task]:
    return [task for task in tasks if task.status == TaskStatus.COMPLETED]


def overdue_tasks(tasks: Iterable[Task], today: date) -> list[Task]:
    """Open tasks whose due date has passed."""
    return [
        task
        for task in tasks
        if task.due_date is not None and task.due_date < today and task.status != TaskStatus.COMPLETED
    ]


def filter_tasks(
    tasks: Iterable[Task],
    *,
    search: str = "",
    status: TaskStatus | None = None,
    priority: TaskPriority | None = None,
) -> list[Task]:
    """Tasks matching a case-insensitive search in title or description.

    ``None`` for *status* or *priority* means "any".
    """
    needle = search.strip().lower()
    matches: list[Task] = []
    for task in tasks:
        if needle and needle not in task.title.lower() and needle not in (task.description or "").lower():
            continue
        if status is not None and task.status != status:
            continue
        if priority is not None and task.priority != priority:
            continue
        matches.append(task)
    return matches


# ------------------------------------------------------------------
# Habits
# ------------------------------------------------------------------


class StreakTier(StrEnum):
    NONE = "none"
    STARTING = "starting"
    MOMENTUM = "momentum"
    AMAZING = "amazing"
    INCREDIBLE = "incredible"


def streak_tier(streak: int) -> StreakTier:
    if streak >= STREAK_TIER_INCREDIBLE:
        return StreakTier.INCREDIBLE
    if streak >= STREAK_TIER_AMAZING:
        return StreakTier.AMAZING
    if streak >= STREAK_TIER_MOMENTUM:
        return StreakTier.MOMENTUM
    if streak > 0:
        return StreakTier.STARTING
    return StreakTier.NONE


def total_streak(habits: Iterable[Habit]) -> int:
    return sum(habit.streak for habit in habits)


def best_streak(habits: Iterable[Habit]) -> int:
    return max((habit.streak for habit in habits), default=0)


def active_habits(habits: Iterable[Habit]) -> list[Habit]:
    """Habits with a running streak."""
    return [habit for habit in habits if habit.streak > 0]


# ------------------------------------------------------------------
# Goals
# ------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class StepSummary:
    total: int
    completed: int


def average_goal_progress(goals: Sequence[Goal]) -> float:
    if not goals:
        return 0.0
    return sum(goal.progress for goal in goals) / len(goals)


def achieved_goals(goals: Iterable[Goal]) -> list[Goal]:
    return [goal for goal in goals if goal.is_achieved]


def step_summary(steps: Iterable[GoalStep], goal_id: str) -> StepSummary:
    own = [step for step in steps if step.goal_id == goal_id]
    return StepSummary(total=len(own), completed=sum(1 for step in own if step.is_completed))


# ------------------------------------------------------------------
# Vision board
# ------------------------------------------------------------------


def pick_quote(rng: random.Random | None = None) -> str:
    """A motivational quote for the vision board."""
    return (rng or random).choice(MOTIVATIONAL_QUOTES)

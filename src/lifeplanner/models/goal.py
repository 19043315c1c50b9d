"""Goal and goal step models."""

from __future__ import annotations

from datetime import date, datetime
from typing import ClassVar

from pydantic import Field

from lifeplanner.models._base import DraftModel, NonEmptyStr, PatchModel, PlannerBaseModel


class Goal(PlannerBaseModel):
    """A long-term goal. ``progress`` is a caller-set percentage."""

    user_id: str
    title: str
    description: str | None = None
    deadline: date | None = None
    progress: int = Field(default=0, ge=0, le=100)
    created_at: datetime | None = None

    @property
    def is_achieved(self) -> bool:
        return self.progress >= 100


class GoalCreate(DraftModel):
    """New goal. Progress always starts at zero."""

    title: NonEmptyStr
    description: str | None = None
    deadline: date | None = None


class GoalUpdate(PatchModel):
    _NON_NULLABLE: ClassVar[frozenset[str]] = frozenset({"title", "progress"})

    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    deadline: date | None = None
    progress: int | None = Field(default=None, ge=0, le=100)


class GoalStep(PlannerBaseModel):
    """One step of a goal's decomposition."""

    goal_id: str
    title: str
    is_completed: bool = False
    created_at: datetime | None = None


class GoalStepCreate(DraftModel):
    goal_id: NonEmptyStr
    title: NonEmptyStr


class GoalStepUpdate(PatchModel):
    _NON_NULLABLE: ClassVar[frozenset[str]] = frozenset({"title", "is_completed"})

    title: str | None = Field(default=None, min_length=1)
    is_completed: bool | None = None

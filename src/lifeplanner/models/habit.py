"""Habit models."""

from __future__ import annotations

from datetime import date, datetime
from enum import StrEnum
from typing import ClassVar

from pydantic import Field

from lifeplanner.models._base import DraftModel, NonEmptyStr, PatchModel, PlannerBaseModel


class HabitFrequency(StrEnum):
    DAILY = "daily"
    WEEKLY = "weekly"
    CUSTOM = "custom"


class Habit(PlannerBaseModel):
    """A recurring habit with its completion streak."""

    user_id: str
    name: str
    description: str | None = None
    frequency: HabitFrequency = HabitFrequency.DAILY
    streak: int = Field(default=0, ge=0)
    last_completed: date | None = None
    created_at: datetime | None = None


class HabitCreate(DraftModel):
    """New habit. The streak always starts at zero and is not caller-settable."""

    name: NonEmptyStr
    description: str | None = None
    frequency: HabitFrequency = HabitFrequency.DAILY


class HabitUpdate(PatchModel):
    """Editable habit fields. The streak moves only through a completion."""

    _NON_NULLABLE: ClassVar[frozenset[str]] = frozenset({"name", "frequency"})

    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    frequency: HabitFrequency | None = None


class HabitCompletion(PatchModel):
    """Streak change written by :meth:`PlannerStore.complete_habit` only."""

    _NON_NULLABLE: ClassVar[frozenset[str]] = frozenset({"streak", "last_completed"})

    streak: int = Field(ge=1)
    last_completed: date

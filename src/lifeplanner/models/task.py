"""Task models."""

from __future__ import annotations

from datetime import date, datetime
from enum import StrEnum
from typing import ClassVar

from pydantic import Field

from lifeplanner.models._base import DraftModel, NonEmptyStr, PatchModel, PlannerBaseModel


class TaskPriority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskStatus(StrEnum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class Task(PlannerBaseModel):
    """A to-do item."""

    user_id: str
    title: str
    description: str | None = None
    due_date: date | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.NOT_STARTED
    tags: list[str] | None = None
    created_at: datetime | None = None

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED


class TaskCreate(DraftModel):
    title: NonEmptyStr
    description: str | None = None
    due_date: date | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    status: TaskStatus = TaskStatus.NOT_STARTED
    tags: list[str] | None = None


class TaskUpdate(PatchModel):
    _NON_NULLABLE: ClassVar[frozenset[str]] = frozenset({"title", "priority", "status"})

    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    due_date: date | None = None
    priority: TaskPriority | None = None
    status: TaskStatus | None = None
    tags: list[str] | None = None

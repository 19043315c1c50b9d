"""Data models for LifePlanner rows and request payloads."""

from lifeplanner.models._base import DraftModel, NonEmptyStr, PatchModel, PlannerBaseModel
from lifeplanner.models.goal import Goal, GoalCreate, GoalStep, GoalStepCreate, GoalStepUpdate, GoalUpdate
from lifeplanner.models.habit import Habit, HabitCreate, HabitFrequency, HabitUpdate
from lifeplanner.models.identity import Identity, Profile, ProfileUpdate
from lifeplanner.models.task import Task, TaskCreate, TaskPriority, TaskStatus, TaskUpdate
from lifeplanner.models.vision import VisionItem, VisionItemCreate, VisionItemUpdate

__all__ = [
    "DraftModel",
    "Goal",
    "GoalCreate",
    "GoalStep",
    "GoalStepCreate",
    "GoalStepUpdate",
    "GoalUpdate",
    "Habit",
    "HabitCreate",
    "HabitFrequency",
    "HabitUpdate",
    "Identity",
    "NonEmptyStr",
    "PatchModel",
    "PlannerBaseModel",
    "Profile",
    "ProfileUpdate",
    "Task",
    "TaskCreate",
    "TaskPriority",
    "TaskStatus",
    "TaskUpdate",
    "VisionItem",
    "VisionItemCreate",
    "VisionItemUpdate",
]

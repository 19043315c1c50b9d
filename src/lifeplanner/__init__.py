"""lifeplanner - Async Python client and sync store for the LifePlanner backend."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("lifeplanner")
except PackageNotFoundError:
    __version__ = "0+local"
from lifeplanner._api._common import eq, in_
from lifeplanner._constants import Table
from lifeplanner._storage import FileSessionStorage, MemorySessionStorage, SessionStorage
from lifeplanner.client import LifePlannerClient, Subscription
from lifeplanner.config import LifePlannerConfig
from lifeplanner.exceptions import (
    LifePlannerApiError,
    LifePlannerAuthenticationError,
    LifePlannerConfigError,
    LifePlannerError,
    LifePlannerNotAuthenticatedError,
    LifePlannerNotFoundError,
    LifePlannerPermissionError,
    LifePlannerSessionExpiredError,
    LifePlannerTransportError,
    LifePlannerValidationError,
)
from lifeplanner.models import (
    Goal,
    GoalCreate,
    GoalStep,
    GoalStepUpdate,
    GoalUpdate,
    Habit,
    HabitCreate,
    HabitFrequency,
    HabitUpdate,
    Identity,
    Profile,
    ProfileUpdate,
    Task,
    TaskCreate,
    TaskPriority,
    TaskStatus,
    TaskUpdate,
    VisionItem,
    VisionItemCreate,
    VisionItemUpdate,
)
from lifeplanner.result import Result
from lifeplanner.session import Session
from lifeplanner.state.events import AuthEvent, AuthState, SessionChange
from lifeplanner.store import PlannerStore
from lifeplanner.timer import PomodoroTimer, TimerMode

__all__ = [
    "__version__",
    "AuthEvent",
    "AuthState",
    "FileSessionStorage",
    "Goal",
    "GoalCreate",
    "GoalStep",
    "GoalStepUpdate",
    "GoalUpdate",
    "Habit",
    "HabitCreate",
    "HabitFrequency",
    "HabitUpdate",
    "Identity",
    "LifePlannerApiError",
    "LifePlannerAuthenticationError",
    "LifePlannerClient",
    "LifePlannerConfig",
    "LifePlannerConfigError",
    "LifePlannerError",
    "LifePlannerNotAuthenticatedError",
    "LifePlannerNotFoundError",
    "LifePlannerPermissionError",
    "LifePlannerSessionExpiredError",
    "LifePlannerTransportError",
    "LifePlannerValidationError",
    "MemorySessionStorage",
    "PlannerStore",
    "PomodoroTimer",
    "Profile",
    "ProfileUpdate",
    "Result",
    "Session",
    "SessionChange",
    "SessionStorage",
    "Subscription",
    "Table",
    "Task",
    "TaskCreate",
    "TaskPriority",
    "TaskStatus",
    "TaskUpdate",
    "TimerMode",
    "VisionItem",
    "VisionItemCreate",
    "VisionItemUpdate",
    "eq",
    "in_",
]

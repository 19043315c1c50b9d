"""Session & sync store.

:class:`PlannerStore` owns the signed-in identity, the in-memory mirror of
the account's five entity collections and every mutation on them. Each
mutation issues one remote call through :class:`LifePlannerClient` and
patches the mirror only after the call succeeded.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from datetime import UTC, date, datetime
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from lifeplanner._api._common import eq
from lifeplanner._constants import Table
from lifeplanner.client import LifePlannerClient, Subscription
from lifeplanner.exceptions import (
    LifePlannerApiError,
    LifePlannerError,
    LifePlannerNotAuthenticatedError,
    LifePlannerNotFoundError,
    LifePlannerValidationError,
)
from lifeplanner.models._base import DraftModel, PatchModel, PlannerBaseModel
from lifeplanner.models.goal import Goal, GoalCreate, GoalStep, GoalStepCreate, GoalStepUpdate, GoalUpdate
from lifeplanner.models.habit import Habit, HabitCompletion, HabitCreate, HabitUpdate
from lifeplanner.models.identity import Identity, Profile, ProfileUpdate
from lifeplanner.models.task import Task, TaskCreate, TaskUpdate
from lifeplanner.models.vision import VisionItem, VisionItemCreate, VisionItemUpdate
from lifeplanner.result import Result
from lifeplanner.state.collections import Collection, EntityCollections
from lifeplanner.state.events import AuthState, SessionChange
from lifeplanner.state.policy import completed_on, needs_bulk_load, next_streak
from lifeplanner.timer import PomodoroTimer

_logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

_ROW_MODELS: dict[Collection, type[PlannerBaseModel]] = {
    Collection.TASKS: Task,
    Collection.HABITS: Habit,
    Collection.GOALS: Goal,
    Collection.GOAL_STEPS: GoalStep,
    Collection.VISION_ITEMS: VisionItem,
}


def _utc_today() -> date:
    return datetime.now(UTC).date()


def _validate(model: type[M], data: M | Mapping[str, Any]) -> M:
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise LifePlannerValidationError(f"Invalid {model.__name__}: {exc}") from exc


def _parse_row(name: Collection, row: Mapping[str, Any]) -> Any:
    try:
        return _ROW_MODELS[name].model_validate(row)
    except ValidationError as exc:
        raise LifePlannerApiError(
            f"{name.table} returned an unexpected row: {exc}",
            code="invalid_row",
            endpoint=f"/rest/v1/{name.table}",
        ) from exc


class PlannerStore:
    """Application state for one LifePlanner user.

    Create one per application and hand it to whatever needs it::

        async with LifePlannerClient(config) as client:
            async with PlannerStore(client) as store:
                await store.sign_in("me@example.com", "secret")
                await store.add_task(TaskCreate(title="Write report"))

    Mutations return a :class:`Result`; they never raise backend or
    validation errors. Concurrent mutations of one record are not ordered:
    the last response to arrive wins in the mirror.
    """

    def __init__(
        self,
        client: LifePlannerClient,
        *,
        today: Callable[[], date] = _utc_today,
        timer: PomodoroTimer | None = None,
    ) -> None:
        self._client = client
        self._today = today
        self._collections = EntityCollections()
        self._identity: Identity | None = None
        self._profile: Profile | None = None
        self._auth_state = AuthState.ANONYMOUS
        self._subscription: Subscription | None = None
        self._load_task: asyncio.Task[None] | None = None
        self._load_owner: str | None = None
        self.timer = timer if timer is not None else PomodoroTimer()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> PlannerStore:
        await self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()

    async def start(self) -> None:
        """Subscribe to session changes, then restore any persisted session.

        The restore arrives as an ``INITIAL_SESSION`` change through the
        same subscription, so there is exactly one path into the
        authenticated state.
        """
        if self._subscription is None:
            self._subscription = self._client.on_auth_state_change(self._on_session_change)
        await self._client.restore_session()
        await self.wait_until_loaded()

    async def stop(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        self.timer.pause()
        await self.wait_until_loaded()

    async def wait_until_loaded(self) -> None:
        """Wait for the bulk load in flight, if any."""
        task = self._load_task
        if task is not None:
            await task

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def identity(self) -> Identity | None:
        return self._identity

    @property
    def auth_state(self) -> AuthState:
        return self._auth_state

    @property
    def is_authenticated(self) -> bool:
        return self._auth_state == AuthState.AUTHENTICATED

    @property
    def profile(self) -> Profile | None:
        return self._profile

    @property
    def tasks(self) -> list[Task]:
        return self._collections.items(Collection.TASKS)

    @property
    def habits(self) -> list[Habit]:
        return self._collections.items(Collection.HABITS)

    @property
    def goals(self) -> list[Goal]:
        return self._collections.items(Collection.GOALS)

    @property
    def goal_steps(self) -> list[GoalStep]:
        return self._collections.items(Collection.GOAL_STEPS)

    @property
    def vision_items(self) -> list[VisionItem]:
        return self._collections.items(Collection.VISION_ITEMS)

    def steps_for(self, goal_id: str) -> list[GoalStep]:
        return [step for step in self.goal_steps if step.goal_id == goal_id]

    # ------------------------------------------------------------------
    # Session handling
    # ------------------------------------------------------------------

    def _on_session_change(self, change: SessionChange) -> None:
        incoming = change.identity
        if incoming is None:
            if self._identity is not None:
                _logger.info("Session ended (%s)", change.event)
            self._reset()
            return

        current_id = self._identity.id if self._identity is not None else None
        if not needs_bulk_load(current_id, incoming.id):
            self._identity = incoming
            self._auth_state = AuthState.AUTHENTICATED
            return

        if current_id is not None:
            # Switching accounts: never show the previous account's rows.
            self._reset()
        self._identity = incoming
        self._auth_state = AuthState.AUTHENTICATED
        _logger.info("Authenticated as %s (%s)", incoming.id, change.event)
        self._schedule_load(incoming)

    def _schedule_load(self, identity: Identity) -> None:
        task = self._load_task
        # A load still running for this identity covers this change too.
        if task is not None and not task.done() and self._load_owner == identity.id:
            return
        self._load_owner = identity.id
        self._load_task = asyncio.get_running_loop().create_task(self.load_user_data())

    def _reset(self) -> None:
        self._identity = None
        self._profile = None
        self._collections.clear()
        self._auth_state = AuthState.ANONYMOUS

    async def load_user_data(self) -> None:
        """Replace all five collections with the identity's rows.

        The fetches run concurrently. A failed fetch is logged and leaves
        its collection as it was; the other collections still update.
        """
        identity = self._identity
        if identity is None:
            return
        _logger.debug("Loading user data for %s", identity.id)

        owned = {"user_id": eq(identity.id)}
        fetches = {
            Collection.TASKS: self._client.select(Table.TASKS, filters=owned),
            Collection.HABITS: self._client.select(Table.HABITS, filters=owned),
            Collection.GOALS: self._client.select(Table.GOALS, filters=owned),
            # Steps carry no owner column; scope them through the parent goal.
            Collection.GOAL_STEPS: self._client.select(
                Table.GOAL_STEPS,
                columns="*,goals!inner(user_id)",
                filters={"goals.user_id": eq(identity.id)},
            ),
            Collection.VISION_ITEMS: self._client.select(Table.VISION_BOARD, filters=owned),
        }
        outcomes = await asyncio.gather(*fetches.values(), return_exceptions=True)

        if self._identity is None or self._identity.id != identity.id:
            _logger.debug("Discarding user data for %s; identity changed while loading", identity.id)
            return

        for name, outcome in zip(fetches, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, LifePlannerError):
                    raise outcome
                _logger.warning("Loading %s failed: %s", name, outcome)
                continue
            try:
                records = [_parse_row(name, row) for row in outcome]
            except LifePlannerError as exc:
                _logger.warning("Loading %s failed: %s", name, exc)
                continue
            self._collections.replace(name, records)

        _logger.info("Loaded user data: %s", self._collections.counts())

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    async def sign_up(self, email: str, password: str, full_name: str | None = None) -> Result[Identity]:
        """Request an account. No session is established until the email is verified."""
        try:
            identity = await self._client.sign_up(email, password, full_name=full_name)
        except LifePlannerError as exc:
            return self._failed("sign up", exc)
        return Result.success(identity)

    async def sign_in(self, email: str, password: str) -> Result[Identity]:
        """Sign in and wait until the account's data is loaded."""
        if self._identity is None:
            self._auth_state = AuthState.AUTHENTICATING
        try:
            await self._client.sign_in(email, password)
        except LifePlannerError as exc:
            if self._identity is None:
                self._auth_state = AuthState.ANONYMOUS
            return self._failed("sign in", exc)
        await self.wait_until_loaded()
        return Result.success(self._identity)

    async def sign_out(self) -> None:
        """Sign out and clear the identity and every collection, whatever the server says."""
        try:
            await self._client.sign_out()
        finally:
            self._reset()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _failed(self, action: str, error: LifePlannerError) -> Result[Any]:
        _logger.warning("Could not %s: %s", action, error)
        return Result.failure(error)

    def _require_identity(self) -> Identity:
        if self._identity is None:
            raise LifePlannerNotAuthenticatedError("Sign in first")
        return self._identity

    def _require_record(self, name: Collection, record_id: str) -> Any:
        record = self._collections.get(name, record_id)
        if record is None:
            raise LifePlannerNotFoundError(f"No {name} record with id {record_id!r}")
        return record

    async def _create(
        self,
        name: Collection,
        draft: DraftModel,
        extra: Mapping[str, Any],
    ) -> Result[Any]:
        try:
            row = await self._client.insert(name.table, {**draft.to_payload(), **extra})
            record = _parse_row(name, row)
        except LifePlannerError as exc:
            return self._failed(f"create {name} record", exc)
        self._collections.append(name, record)
        return Result.success(record)

    async def _create_owned(
        self,
        name: Collection,
        draft_model: type[DraftModel],
        data: DraftModel | Mapping[str, Any],
        defaults: Mapping[str, Any] | None = None,
    ) -> Result[Any]:
        try:
            identity = self._require_identity()
            draft = _validate(draft_model, data)
        except LifePlannerError as exc:
            return self._failed(f"create {name} record", exc)
        return await self._create(name, draft, {**(defaults or {}), "user_id": identity.id})

    async def _update(
        self,
        name: Collection,
        record_id: str,
        patch_model: type[PatchModel],
        data: PatchModel | Mapping[str, Any],
    ) -> Result[Any]:
        try:
            patch = _validate(patch_model, data)
            if patch.is_empty:
                raise LifePlannerValidationError(f"Nothing to update on {name} record {record_id!r}")
            self._require_record(name, record_id)
            await self._client.update(name.table, patch.to_payload(), filters={"id": eq(record_id)})
        except LifePlannerError as exc:
            return self._failed(f"update {name} record", exc)
        patched = self._collections.patch(name, record_id, patch.changes())
        if patched is None:
            # Deleted or signed out while the update was in flight.
            return self._failed(
                f"update {name} record",
                LifePlannerNotFoundError(f"No {name} record with id {record_id!r}"),
            )
        return Result.success(patched)

    async def _delete(self, name: Collection, record_id: str) -> Result[Any]:
        try:
            self._require_record(name, record_id)
            await self._client.delete(name.table, filters={"id": eq(record_id)})
        except LifePlannerError as exc:
            return self._failed(f"delete {name} record", exc)
        return Result.success(self._collections.remove(name, record_id))

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    async def add_task(self, task: TaskCreate | Mapping[str, Any]) -> Result[Task]:
        return await self._create_owned(Collection.TASKS, TaskCreate, task)

    async def update_task(self, task_id: str, changes: TaskUpdate | Mapping[str, Any]) -> Result[Task]:
        return await self._update(Collection.TASKS, task_id, TaskUpdate, changes)

    async def delete_task(self, task_id: str) -> Result[Task]:
        return await self._delete(Collection.TASKS, task_id)

    # ------------------------------------------------------------------
    # Habits
    # ------------------------------------------------------------------

    async def add_habit(self, habit: HabitCreate | Mapping[str, Any]) -> Result[Habit]:
        return await self._create_owned(Collection.HABITS, HabitCreate, habit, {"streak": 0})

    async def update_habit(self, habit_id: str, changes: HabitUpdate | Mapping[str, Any]) -> Result[Habit]:
        return await self._update(Collection.HABITS, habit_id, HabitUpdate, changes)

    async def delete_habit(self, habit_id: str) -> Result[Habit]:
        return await self._delete(Collection.HABITS, habit_id)

    async def complete_habit(self, habit_id: str) -> Result[Habit]:
        """Mark a habit done today.

        A second completion on the same day returns the habit unchanged
        without a remote call; otherwise the streak grows by one.
        """
        try:
            habit: Habit = self._require_record(Collection.HABITS, habit_id)
        except LifePlannerError as exc:
            return self._failed("complete habit", exc)

        today = self._today()
        if completed_on(habit, today):
            return Result.success(habit)
        return await self._update(
            Collection.HABITS,
            habit_id,
            HabitCompletion,
            HabitCompletion(streak=next_streak(habit, today), last_completed=today),
        )

    # ------------------------------------------------------------------
    # Goals
    # ------------------------------------------------------------------

    async def add_goal(self, goal: GoalCreate | Mapping[str, Any]) -> Result[Goal]:
        return await self._create_owned(Collection.GOALS, GoalCreate, goal, {"progress": 0})

    async def update_goal(self, goal_id: str, changes: GoalUpdate | Mapping[str, Any]) -> Result[Goal]:
        return await self._update(Collection.GOALS, goal_id, GoalUpdate, changes)

    async def delete_goal(self, goal_id: str) -> Result[Goal]:
        """Delete a goal and drop its steps from the mirror.

        Only the goal is deleted remotely; the steps are removed locally
        afterwards, so the two are not atomic.
        """
        result = await self._delete(Collection.GOALS, goal_id)
        if result.ok:
            dropped = self._collections.remove_where(Collection.GOAL_STEPS, lambda step: step.goal_id == goal_id)
            _logger.debug("Dropped %d steps of deleted goal %s", dropped, goal_id)
        return result

    async def add_goal_step(self, goal_id: str, title: str) -> Result[GoalStep]:
        """Add a step to a goal present in the mirror."""
        try:
            self._require_identity()
            draft = _validate(GoalStepCreate, {"goal_id": goal_id, "title": title})
            self._require_record(Collection.GOALS, goal_id)
        except LifePlannerError as exc:
            return self._failed("create goal step", exc)
        return await self._create(Collection.GOAL_STEPS, draft, {})

    async def update_goal_step(self, step_id: str, changes: GoalStepUpdate | Mapping[str, Any]) -> Result[GoalStep]:
        return await self._update(Collection.GOAL_STEPS, step_id, GoalStepUpdate, changes)

    async def delete_goal_step(self, step_id: str) -> Result[GoalStep]:
        return await self._delete(Collection.GOAL_STEPS, step_id)

    # ------------------------------------------------------------------
    # Vision board
    # ------------------------------------------------------------------

    async def add_vision_item(self, item: VisionItemCreate | Mapping[str, Any]) -> Result[VisionItem]:
        return await self._create_owned(Collection.VISION_ITEMS, VisionItemCreate, item)

    async def update_vision_item(
        self,
        item_id: str,
        changes: VisionItemUpdate | Mapping[str, Any],
    ) -> Result[VisionItem]:
        return await self._update(Collection.VISION_ITEMS, item_id, VisionItemUpdate, changes)

    async def delete_vision_item(self, item_id: str) -> Result[VisionItem]:
        return await self._delete(Collection.VISION_ITEMS, item_id)

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    async def get_profile(self) -> Result[Profile | None]:
        """Fetch the account's profile; the value is ``None`` until one is saved."""
        try:
            identity = self._require_identity()
            rows = await self._client.select(Table.PROFILES, filters={"id": eq(identity.id)})
            profile = Profile.model_validate(rows[0]) if rows else None
        except LifePlannerError as exc:
            return self._failed("load profile", exc)
        except ValidationError as exc:
            return self._failed(
                "load profile",
                LifePlannerApiError(f"profiles returned an unexpected row: {exc}", code="invalid_row"),
            )
        self._profile = profile
        return Result.success(profile)

    async def save_profile(self, changes: ProfileUpdate | Mapping[str, Any]) -> Result[Profile]:
        """Create or update the account's profile."""
        try:
            identity = self._require_identity()
            patch = _validate(ProfileUpdate, changes)
            row = await self._client.upsert(Table.PROFILES, {**patch.to_payload(), "id": identity.id})
            profile = Profile.model_validate(row)
        except LifePlannerError as exc:
            return self._failed("save profile", exc)
        except ValidationError as exc:
            return self._failed(
                "save profile",
                LifePlannerApiError(f"profiles returned an unexpected row: {exc}", code="invalid_row"),
            )
        self._profile = profile
        return Result.success(profile)

"""In-memory entity collections.

This is the only component allowed to mutate the local mirror of the
backend's rows. Each collection keeps insertion order.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from enum import StrEnum
from typing import Any

from lifeplanner._constants import Table
from lifeplanner.models._base import PlannerBaseModel


class Collection(StrEnum):
    TASKS = "tasks"
    HABITS = "habits"
    GOALS = "goals"
    GOAL_STEPS = "goal_steps"
    VISION_ITEMS = "vision_items"

    @property
    def table(self) -> Table:
        return _COLLECTION_TABLES[self]


_COLLECTION_TABLES: dict[Collection, Table] = {
    Collection.TASKS: Table.TASKS,
    Collection.HABITS: Table.HABITS,
    Collection.GOALS: Table.GOALS,
    Collection.GOAL_STEPS: Table.GOAL_STEPS,
    Collection.VISION_ITEMS: Table.VISION_BOARD,
}


class EntityCollections:
    """The five entity collections of one signed-in account."""

    def __init__(self) -> None:
        self._records: dict[Collection, list[PlannerBaseModel]] = {name: [] for name in Collection}

    def items(self, name: Collection) -> list[Any]:
        """A copy of the collection; mutating it does not touch the mirror."""
        return list(self._records[name])

    def get(self, name: Collection, record_id: str) -> Any | None:
        for record in self._records[name]:
            if record.id == record_id:
                return record
        return None

    def replace(self, name: Collection, records: Iterable[PlannerBaseModel]) -> None:
        """Replace the whole collection (bulk load)."""
        self._records[name] = list(records)

    def append(self, name: Collection, record: PlannerBaseModel) -> None:
        self._records[name].append(record)

    def patch(self, name: Collection, record_id: str, changes: Mapping[str, Any]) -> Any | None:
        """Shallow-merge *changes* into the matching record.

        Returns the patched record, or ``None`` if no record matched.
        """
        records = self._records[name]
        for index, record in enumerate(records):
            if record.id == record_id:
                patched = record.model_copy(update=dict(changes))
                records[index] = patched
                return patched
        return None

    def remove(self, name: Collection, record_id: str) -> Any | None:
        """Remove the matching record and return it."""
        records = self._records[name]
        for index, record in enumerate(records):
            if record.id == record_id:
                return records.pop(index)
        return None

    def remove_where(self, name: Collection, predicate: Callable[[Any], bool]) -> int:
        """Remove every record matching *predicate*; returns how many were removed."""
        before = self._records[name]
        kept = [record for record in before if not predicate(record)]
        self._records[name] = kept
        return len(before) - len(kept)

    def counts(self) -> dict[str, int]:
        return {str(name): len(records) for name, records in self._records.items()}

    def clear(self) -> None:
        """Empty every collection."""
        for name in Collection:
            self._records[name] = []

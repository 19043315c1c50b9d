"""Outcome of a store operation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from lifeplanner.exceptions import LifePlannerError

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Result(Generic[T]):
    """Either the affected record (``value``) or the ``error`` that prevented it.

    Store operations never raise backend or validation failures; they
    return them here. ``unwrap()`` re-raises for callers that prefer
    exceptions.
    """

    value: T | None = None
    error: LifePlannerError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T | None = None) -> Result[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: LifePlannerError) -> Result[T]:
        return cls(error=error)

    def unwrap(self) -> T | None:
        if self.error is not None:
            raise self.error
        return self.value

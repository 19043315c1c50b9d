"""Base models for LifePlanner rows, create drafts and update patches.

Three flavours exist for every entity:

* rows inherit from :class:`PlannerBaseModel` and are parsed from what the
  backend returns (unknown columns ignored, null columns fall back to the
  field default, instances frozen);
* drafts inherit from :class:`DraftModel` and carry the caller-supplied
  fields of a create request;
* patches inherit from :class:`PatchModel` and carry the fields of a
  partial update. Only fields the caller explicitly set are sent.
"""

from __future__ import annotations

from typing import Annotated, Any, ClassVar

from pydantic import BaseModel, ConfigDict, StringConstraints, model_validator

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
"""A string that is non-empty after stripping surrounding whitespace."""


class PlannerBaseModel(BaseModel):
    """Base for rows returned by the backend."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    id: str

    @model_validator(mode="before")
    @classmethod
    def _drop_null_columns(cls, values: Any) -> Any:
        """Drop null columns that have a default so the default is used."""
        if not isinstance(values, dict):
            return values
        fields = cls.model_fields
        return {
            key: value
            for key, value in values.items()
            if value is not None or key not in fields or fields[key].is_required()
        }


class DraftModel(BaseModel):
    """Base for create payloads."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        str_strip_whitespace=True,
    )

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready insert payload (unset optional fields omitted)."""
        return self.model_dump(mode="json", exclude_none=True)


class PatchModel(BaseModel):
    """Base for partial update payloads."""

    _NON_NULLABLE: ClassVar[frozenset[str]] = frozenset()
    """Fields that may be omitted but never explicitly set to ``None``."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        str_strip_whitespace=True,
    )

    @model_validator(mode="after")
    def _reject_null_required(self) -> PatchModel:
        for name in self.model_fields_set & type(self)._NON_NULLABLE:
            if getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict[str, Any]:
        """Explicitly set fields as Python values, for merging into a row."""
        return self.model_dump(exclude_unset=True)

    def to_payload(self) -> dict[str, Any]:
        """Explicitly set fields as JSON values, for the update request."""
        return self.model_dump(mode="json", exclude_unset=True)

    @property
    def is_empty(self) -> bool:
        return not self.model_fields_set

"""Identity and profile models."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from lifeplanner.models._base import PatchModel, PlannerBaseModel


class Identity(BaseModel):
    """The authenticated account.

    Built from the auth service's user object; the display name comes
    from ``user_metadata.full_name`` as stored at sign-up.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(min_length=1)
    email: str | None = None
    full_name: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _lift_metadata(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        merged = dict(values)
        metadata = merged.get("user_metadata")
        if isinstance(metadata, dict) and "full_name" not in merged:
            merged["full_name"] = metadata.get("full_name")
        return merged


class Profile(PlannerBaseModel):
    """Account settings row (``profiles`` table, keyed by identity id)."""

    full_name: str | None = None
    avatar_url: str | None = None
    created_at: datetime | None = None


class ProfileUpdate(PatchModel):
    full_name: str | None = None
    avatar_url: str | None = None

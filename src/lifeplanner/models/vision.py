"""Vision board models."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar

from pydantic import field_validator, model_validator

from lifeplanner.models._base import DraftModel, PatchModel, PlannerBaseModel


class VisionItem(PlannerBaseModel):
    """An image and/or quote pinned on the vision board."""

    user_id: str
    image_url: str | None = None
    quote: str | None = None
    position_x: int = 0
    position_y: int = 0
    created_at: datetime | None = None


class VisionItemCreate(DraftModel):
    """New vision board item. Needs a quote, an image URL, or both."""

    image_url: str | None = None
    quote: str | None = None
    position_x: int = 0
    position_y: int = 0

    @field_validator("image_url", "quote")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        return value or None

    @model_validator(mode="after")
    def _require_content(self) -> VisionItemCreate:
        if self.image_url is None and self.quote is None:
            raise ValueError("a vision board item needs a quote or an image URL")
        return self


class VisionItemUpdate(PatchModel):
    _NON_NULLABLE: ClassVar[frozenset[str]] = frozenset({"position_x", "position_y"})

    image_url: str | None = None
    quote: str | None = None
    position_x: int | None = None
    position_y: int | None = None

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..value_objects.ids import EmojiCategoryId
from ._timestamps import coerce_utc, utcnow

CATEGORY_COLUMNS: tuple[str, ...] = ("id", "name", "created_at", "updated_at")


class EmojiCategory(BaseModel):
    id: EmojiCategoryId = Field(..., min_length=1, description="Unique category identifier")
    name: str = Field(..., min_length=1, description="Display name, unique ignoring case")
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    model_config = ConfigDict(frozen=True)

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def _ensure_utc(cls, v: datetime) -> datetime:
        return coerce_utc(v)

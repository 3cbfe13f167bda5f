from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..value_objects.ids import EmojiCategoryId, EmojiId
from ._timestamps import coerce_utc, utcnow
from .category import EmojiCategory

# Persisted columns, in table order. ``category`` is a relation, not a column.
EMOJI_COLUMNS: tuple[str, ...] = (
    "id",
    "shortcode",
    "domain",
    "created_at",
    "updated_at",
    "image_remote_url",
    "image_static_remote_url",
    "image_url",
    "image_static_url",
    "image_content_type",
    "image_file_size",
    "uri",
    "disabled",
    "visible_in_picker",
    "category_id",
)


def shortcode_domain_key(shortcode: str, domain: Optional[str]) -> str:
    """Return the lowercase ``shortcode@domain`` key used for ordering and lookup.

    >>> shortcode_domain_key("Blob", None)
    'blob@'
    >>> shortcode_domain_key("cat", "Remote.Example")
    'cat@remote.example'
    """
    return f"{shortcode}@{domain or ''}".lower()


class Emoji(BaseModel):
    """A custom emoji, hosted locally (``domain is None``) or fetched from a remote."""

    id: EmojiId = Field(..., min_length=1, description="Unique, immutable identifier")
    shortcode: str = Field(..., min_length=1, description="Text handle, e.g. ``blobcat``")
    domain: str | None = Field(default=None, description="Origin domain; None means local")
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    image_remote_url: str | None = None
    image_static_remote_url: str | None = None
    image_url: str = ""
    image_static_url: str = ""
    image_content_type: str = ""
    image_file_size: int = Field(default=0, ge=0)
    uri: str = Field(..., min_length=1, description="ActivityPub URI, globally unique")
    disabled: bool = False
    visible_in_picker: bool = True
    category_id: EmojiCategoryId | None = None
    category: EmojiCategory | None = Field(default=None, description="Eagerly loaded relation")

    model_config = ConfigDict(frozen=True)

    @field_validator("domain", mode="before")
    @classmethod
    def _empty_domain_is_local(cls, v: Any) -> Any:
        # "" must never be stored next to real domains; it means local.
        if v == "":
            return None
        return v

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def _ensure_utc(cls, v: datetime) -> datetime:
        return coerce_utc(v)

    @property
    def is_local(self) -> bool:
        return self.domain is None

    @property
    def shortcode_domain(self) -> str:
        return shortcode_domain_key(self.shortcode, self.domain)

    def to_row(self) -> dict[str, Any]:
        """Return the column values of this emoji, keyed by column name."""
        return {column: getattr(self, column) for column in EMOJI_COLUMNS}

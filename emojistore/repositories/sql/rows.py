from __future__ import annotations

from typing import Any, Mapping

from pydantic import ValidationError

from emojistore.db.query import SelectQuery
from emojistore.domain.entities import CATEGORY_COLUMNS, EMOJI_COLUMNS, Emoji, EmojiCategory
from emojistore.domain.errors import BackendError

_CATEGORY_PREFIX = "category__"


def emoji_select() -> SelectQuery:
    """Select every emoji column with its category eagerly joined."""
    return (
        SelectQuery("emojis AS emoji")
        .column(*(f"emoji.{c}" for c in EMOJI_COLUMNS))
        .column(*(f"category.{c} AS {_CATEGORY_PREFIX}{c}" for c in CATEGORY_COLUMNS))
        .join("LEFT JOIN emoji_categories AS category ON category.id = emoji.category_id")
    )


def category_select() -> SelectQuery:
    return SelectQuery("emoji_categories AS emoji_category").column(
        *(f"emoji_category.{c}" for c in CATEGORY_COLUMNS)
    )


def category_from_row(row: Mapping[str, Any]) -> EmojiCategory:
    try:
        return EmojiCategory(**{c: row[c] for c in CATEGORY_COLUMNS})
    except ValidationError as exc:
        raise BackendError(f"malformed emoji category row {row.get('id')!r}: {exc}") from exc


def emoji_from_row(row: Mapping[str, Any]) -> Emoji:
    """Build an emoji (and its joined category) from a storage row.

    A row that fails validation is a storage problem, reported as :class:`BackendError`.
    """
    try:
        category = None
        if row.get(f"{_CATEGORY_PREFIX}id") is not None:
            category = EmojiCategory(**{c: row[f"{_CATEGORY_PREFIX}{c}"] for c in CATEGORY_COLUMNS})
        return Emoji(**{c: row[c] for c in EMOJI_COLUMNS}, category=category)
    except ValidationError as exc:
        raise BackendError(f"malformed emoji row {row.get('id')!r}: {exc}") from exc

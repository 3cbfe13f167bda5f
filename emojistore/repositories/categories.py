from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from emojistore.domain.context import OperationContext
from emojistore.domain.entities import EmojiCategory


class EmojiCategoryRepo(ABC):
    """Repository interface for emoji categories."""

    @abstractmethod
    def put_emoji_category(
        self, category: EmojiCategory, *, ctx: Optional[OperationContext] = None
    ) -> None:
        """Insert a new category and cache it."""

    @abstractmethod
    def get_emoji_categories(self, *, ctx: Optional[OperationContext] = None) -> list[EmojiCategory]:
        """List all categories ordered by name."""

    @abstractmethod
    def get_emoji_category(
        self, category_id: str, *, ctx: Optional[OperationContext] = None
    ) -> EmojiCategory:
        """Fetch a category by ID."""

    @abstractmethod
    def get_emoji_category_by_name(
        self, name: str, *, ctx: Optional[OperationContext] = None
    ) -> EmojiCategory:
        """Fetch a category by name, ignoring case."""

"""Repository interfaces and implementations.

This package defines the abstract emoji and category repositories and their
SQL implementations under :mod:`emojistore.repositories.sql`.
"""

from .categories import EmojiCategoryRepo
from .emojis import EmojiRepo
from .pagination import EMOJI_ALL_DOMAINS, EmojiListParams

__all__ = ["EMOJI_ALL_DOMAINS", "EmojiCategoryRepo", "EmojiListParams", "EmojiRepo"]

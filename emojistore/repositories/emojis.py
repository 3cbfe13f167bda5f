from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from emojistore.domain.context import OperationContext
from emojistore.domain.entities import Emoji

from .pagination import EmojiListParams


class EmojiRepo(ABC):
    """Repository interface for custom emoji.

    Every method accepts an optional ``ctx`` bounding the storage calls it
    makes; lookups answered from the cache never consult it.
    """

    @abstractmethod
    def put_emoji(self, emoji: Emoji, *, ctx: Optional[OperationContext] = None) -> None:
        """
        Insert a new emoji and cache it.

        :raises AlreadyExistsError: if the ID, URI or shortcode/domain pair is taken.
        """

    @abstractmethod
    def update_emoji(
        self, emoji: Emoji, *columns: str, ctx: Optional[OperationContext] = None
    ) -> Emoji:
        """
        Write ``columns`` of ``emoji`` (plus ``updated_at``) and drop its cache entry.

        Example:
            >>> repo.update_emoji(emoji.model_copy(update={"disabled": True}), "disabled")

        :return: the emoji with a refreshed ``updated_at``.
        """

    @abstractmethod
    def delete_emoji_by_id(self, emoji_id: str, *, ctx: Optional[OperationContext] = None) -> None:
        """
        Delete an emoji and its status/account links atomically.

        :raises TransactionError: if any step failed; nothing was removed.
        """

    @abstractmethod
    def get_emoji_by_id(self, emoji_id: str, *, ctx: Optional[OperationContext] = None) -> Emoji:
        """Fetch an emoji by ID. :raises NotFoundError: if absent."""

    @abstractmethod
    def get_emoji_by_uri(self, uri: str, *, ctx: Optional[OperationContext] = None) -> Emoji:
        """Fetch an emoji by its URI."""

    @abstractmethod
    def get_emoji_by_shortcode_domain(
        self, shortcode: str, domain: str, *, ctx: Optional[OperationContext] = None
    ) -> Emoji:
        """Fetch an emoji by shortcode and domain; ``domain=""`` means local."""

    @abstractmethod
    def get_emoji_by_static_url(
        self, image_static_url: str, *, ctx: Optional[OperationContext] = None
    ) -> Emoji:
        """Fetch an emoji by its static image URL."""

    @abstractmethod
    def get_emojis(
        self, params: EmojiListParams, *, ctx: Optional[OperationContext] = None
    ) -> list[Emoji]:
        """
        List emoji matching ``params`` in ascending ``shortcode@domain`` order.

        :raises NoEntriesError: if nothing matched.
        """

    @abstractmethod
    def get_useable_emojis(self, *, ctx: Optional[OperationContext] = None) -> list[Emoji]:
        """List local, enabled, picker-visible emoji ordered by shortcode."""

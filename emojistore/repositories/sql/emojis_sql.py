from __future__ import annotations

import logging
from typing import Optional

from emojistore.db.storage import Storage
from emojistore.domain.context import OperationContext, ensure_context
from emojistore.domain.entities import EMOJI_COLUMNS, Emoji, utcnow
from emojistore.infrastructure.entity_cache import EmojiCache
from emojistore.logging_config import CacheStats

from ..cache_aside import get_or_load
from ..cascade import EMOJI_DELETE_STEPS, CascadingDeleter
from ..emojis import EmojiRepo
from ..hydration import hydrate_ids
from ..pagination import EmojiListParams, PaginatedLister
from .rows import emoji_from_row, emoji_select

logger = logging.getLogger(__name__)

UPDATABLE_COLUMNS = frozenset(EMOJI_COLUMNS) - {"id", "created_at"}


class EmojiRepoSql(EmojiRepo):
    """SQL implementation of :class:`EmojiRepo` with a cache-aside read path.

    The cache is injected so tests (or several repositories) can supply their
    own; it is never a process-wide singleton.

    Example:
        >>> repo = EmojiRepoSql(SqliteStorage(path), EmojiCache())
        >>> repo.put_emoji(Emoji(id="01", shortcode="blob", uri="https://x/emoji/01"))
        >>> repo.get_emoji_by_shortcode_domain("blob", "").id
        '01'
    """

    def __init__(
        self,
        storage: Storage,
        cache: EmojiCache | None = None,
        *,
        stats: CacheStats | None = None,
    ) -> None:
        self._storage = storage
        self._cache = cache if cache is not None else EmojiCache()
        self._stats = stats
        self._lister = PaginatedLister(storage)
        self._deleter = CascadingDeleter(storage, EMOJI_DELETE_STEPS)

    @property
    def cache(self) -> EmojiCache:
        return self._cache

    @property
    def stats(self) -> CacheStats | None:
        return self._stats

    # -- writes -----------------------------------------------------------------

    def put_emoji(self, emoji: Emoji, *, ctx: Optional[OperationContext] = None) -> None:
        self._storage.insert(ensure_context(ctx), "emojis", emoji.to_row())
        self._cache.put(emoji)

    def update_emoji(
        self, emoji: Emoji, *columns: str, ctx: Optional[OperationContext] = None
    ) -> Emoji:
        unknown = set(columns) - UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"cannot update emoji columns: {', '.join(sorted(unknown))}")

        emoji = emoji.model_copy(update={"updated_at": utcnow()})
        row = emoji.to_row()
        values = {column: row[column] for column in (*columns, "updated_at")}
        self._storage.update_columns(ensure_context(ctx), "emojis", emoji.id, values)

        # Changed columns may move the emoji between secondary keys; reload on next read.
        self._cache.invalidate(emoji.id)
        return emoji

    def delete_emoji_by_id(self, emoji_id: str, *, ctx: Optional[OperationContext] = None) -> None:
        self._deleter.delete(ensure_context(ctx), emoji_id)
        self._cache.invalidate(emoji_id)
        logger.info("Deleted emoji", extra={"entity_id": emoji_id})

    # -- single reads -----------------------------------------------------------

    def get_emoji_by_id(self, emoji_id: str, *, ctx: Optional[OperationContext] = None) -> Emoji:
        return self._get_emoji(
            lambda: self._cache.get_by_id(emoji_id),
            ctx,
            "emoji.id = ?",
            emoji_id,
        )

    def get_emoji_by_uri(self, uri: str, *, ctx: Optional[OperationContext] = None) -> Emoji:
        return self._get_emoji(
            lambda: self._cache.get_by_uri(uri),
            ctx,
            "emoji.uri = ?",
            uri,
        )

    def get_emoji_by_shortcode_domain(
        self, shortcode: str, domain: str, *, ctx: Optional[OperationContext] = None
    ) -> Emoji:
        cache_get = lambda: self._cache.get_by_shortcode_domain(shortcode, domain)  # noqa: E731
        # Lookups ignore case, matching the cache key and the unique index.
        if domain:
            return self._get_emoji(
                cache_get,
                ctx,
                "LOWER(emoji.shortcode) = ? AND LOWER(emoji.domain) = ?",
                shortcode.lower(),
                domain.lower(),
            )
        return self._get_emoji(
            cache_get,
            ctx,
            "LOWER(emoji.shortcode) = ? AND emoji.domain IS NULL",
            shortcode.lower(),
        )

    def get_emoji_by_static_url(
        self, image_static_url: str, *, ctx: Optional[OperationContext] = None
    ) -> Emoji:
        return self._get_emoji(
            lambda: self._cache.get_by_image_static_url(image_static_url),
            ctx,
            "emoji.image_static_url = ?",
            image_static_url,
        )

    # -- listings ---------------------------------------------------------------

    def get_emojis(
        self, params: EmojiListParams, *, ctx: Optional[OperationContext] = None
    ) -> list[Emoji]:
        ctx = ensure_context(ctx)
        ids = self._lister.list_ids(ctx, params)
        return self._emojis_from_ids(ctx, ids)

    def get_useable_emojis(self, *, ctx: Optional[OperationContext] = None) -> list[Emoji]:
        ctx = ensure_context(ctx)
        return self._emojis_from_ids(ctx, self._lister.useable_ids(ctx))

    # -- helpers ----------------------------------------------------------------

    def _get_emoji(self, cache_get, ctx: Optional[OperationContext], clause: str, *args: object) -> Emoji:
        def load() -> Emoji:
            query = emoji_select().where(clause, *args)
            return emoji_from_row(self._storage.select_one(ensure_context(ctx), query))

        return get_or_load(self._cache, cache_get, load, stats=self._stats)

    def _emojis_from_ids(self, ctx: OperationContext, ids: list[str]) -> list[Emoji]:
        return hydrate_ids(ids, lambda emoji_id: self.get_emoji_by_id(emoji_id, ctx=ctx), kind="emoji")

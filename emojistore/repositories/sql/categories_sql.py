from __future__ import annotations

from typing import Optional

from emojistore.db.query import SelectQuery
from emojistore.db.storage import Storage
from emojistore.domain.context import OperationContext, ensure_context
from emojistore.domain.entities import CATEGORY_COLUMNS, EmojiCategory
from emojistore.infrastructure.entity_cache import EmojiCategoryCache
from emojistore.logging_config import CacheStats

from ..cache_aside import get_or_load
from ..categories import EmojiCategoryRepo
from ..hydration import hydrate_ids
from .rows import category_from_row, category_select


class EmojiCategoryRepoSql(EmojiCategoryRepo):
    """SQL implementation of :class:`EmojiCategoryRepo`."""

    def __init__(
        self,
        storage: Storage,
        cache: EmojiCategoryCache | None = None,
        *,
        stats: CacheStats | None = None,
    ) -> None:
        self._storage = storage
        self._cache = cache if cache is not None else EmojiCategoryCache()
        self._stats = stats

    @property
    def cache(self) -> EmojiCategoryCache:
        return self._cache

    @property
    def stats(self) -> CacheStats | None:
        return self._stats

    def put_emoji_category(
        self, category: EmojiCategory, *, ctx: Optional[OperationContext] = None
    ) -> None:
        values = {column: getattr(category, column) for column in CATEGORY_COLUMNS}
        self._storage.insert(ensure_context(ctx), "emoji_categories", values)
        self._cache.put(category)

    def get_emoji_categories(self, *, ctx: Optional[OperationContext] = None) -> list[EmojiCategory]:
        ctx = ensure_context(ctx)
        query = (
            SelectQuery("emoji_categories AS emoji_category")
            .column("emoji_category.id")
            .order("emoji_category.name ASC")
        )
        ids = self._storage.select_ids(ctx, query)
        return hydrate_ids(
            ids, lambda category_id: self.get_emoji_category(category_id, ctx=ctx), kind="emoji category"
        )

    def get_emoji_category(
        self, category_id: str, *, ctx: Optional[OperationContext] = None
    ) -> EmojiCategory:
        return self._get_category(
            lambda: self._cache.get_by_id(category_id),
            ctx,
            "emoji_category.id = ?",
            category_id,
        )

    def get_emoji_category_by_name(
        self, name: str, *, ctx: Optional[OperationContext] = None
    ) -> EmojiCategory:
        return self._get_category(
            lambda: self._cache.get_by_name(name),
            ctx,
            "LOWER(emoji_category.name) = ?",
            name.lower(),
        )

    def _get_category(
        self, cache_get, ctx: Optional[OperationContext], clause: str, *args: object
    ) -> EmojiCategory:
        def load() -> EmojiCategory:
            query = category_select().where(clause, *args)
            return category_from_row(self._storage.select_one(ensure_context(ctx), query))

        return get_or_load(self._cache, cache_get, load, stats=self._stats)

from __future__ import annotations

from typing import Callable, Optional, TypeVar

from emojistore.infrastructure.entity_cache import EntityCache
from emojistore.logging_config import CacheStats

T = TypeVar("T")


def get_or_load(
    cache: EntityCache[T],
    cache_get: Callable[[], Optional[T]],
    load: Callable[[], T],
    *,
    stats: CacheStats | None = None,
) -> T:
    """Return the cached entity, or load it from storage and cache it.

    A failing ``load`` propagates and leaves the cache untouched. There is no
    single-flight: concurrent misses may both load and both ``put`` the same
    row, which is harmless.
    """
    entity = cache_get()
    if entity is not None:
        if stats is not None:
            stats.record_hit()
        return entity

    if stats is not None:
        stats.record_miss()
    entity = load()
    cache.put(entity)
    return entity

from __future__ import annotations

import threading
from typing import Callable, Dict, Generic, Hashable, Mapping, Optional, TypeVar

from emojistore.domain.entities import Emoji, EmojiCategory, shortcode_domain_key

T = TypeVar("T")

KeyFunc = Callable[[T], Optional[Hashable]]


class EntityCache(Generic[T]):
    """Thread-safe in-memory index over one entity kind.

    - Indexes every entity by its primary ID and by each declared secondary key.
    - A key function returning ``None`` leaves the entity out of that index.
    - No eviction or TTL; entries live until :meth:`invalidate` or :meth:`clear`.
    """

    def __init__(self, id_of: Callable[[T], str], indexes: Mapping[str, KeyFunc[T]] | None = None) -> None:
        self._id_of = id_of
        self._key_funcs: Dict[str, KeyFunc[T]] = dict(indexes or {})
        self._lock = threading.RLock()
        self._by_id: Dict[str, T] = {}
        self._indexes: Dict[str, Dict[Hashable, str]] = {name: {} for name in self._key_funcs}
        # id -> {index name: key} so invalidation can find every secondary entry
        self._reverse: Dict[str, Dict[str, Hashable]] = {}

    def put(self, entity: T) -> None:
        entity_id = self._id_of(entity)
        with self._lock:
            self._drop(entity_id)
            self._by_id[entity_id] = entity
            keys: Dict[str, Hashable] = {}
            for name, key_of in self._key_funcs.items():
                key = key_of(entity)
                if key is None:
                    continue
                self._indexes[name][key] = entity_id
                keys[name] = key
            self._reverse[entity_id] = keys

    def get_by_id(self, entity_id: str) -> Optional[T]:
        with self._lock:
            return self._by_id.get(entity_id)

    def get(self, index: str, key: Hashable) -> Optional[T]:
        """Look up an entity through the secondary index ``index``."""
        with self._lock:
            entity_id = self._indexes[index].get(key)
            if entity_id is None:
                return None
            return self._by_id.get(entity_id)

    def invalidate(self, entity_id: str) -> None:
        with self._lock:
            self._drop(entity_id)

    def clear(self) -> None:
        with self._lock:
            self._by_id.clear()
            self._reverse.clear()
            for index in self._indexes.values():
                index.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_id)

    def __contains__(self, entity_id: object) -> bool:
        with self._lock:
            return entity_id in self._by_id

    def _drop(self, entity_id: str) -> None:
        self._by_id.pop(entity_id, None)
        for name, key in self._reverse.pop(entity_id, {}).items():
            index = self._indexes[name]
            # Another entity may have claimed the key since; leave it alone.
            if index.get(key) == entity_id:
                del index[key]


class EmojiCache(EntityCache[Emoji]):
    """Emoji index by ID, URI, ``shortcode@domain`` and static image URL."""

    def __init__(self) -> None:
        super().__init__(
            lambda e: e.id,
            {
                "uri": lambda e: e.uri,
                "shortcode_domain": lambda e: e.shortcode_domain,
                "image_static_url": lambda e: e.image_static_url or None,
            },
        )

    def get_by_uri(self, uri: str) -> Optional[Emoji]:
        return self.get("uri", uri)

    def get_by_shortcode_domain(self, shortcode: str, domain: Optional[str]) -> Optional[Emoji]:
        return self.get("shortcode_domain", shortcode_domain_key(shortcode, domain))

    def get_by_image_static_url(self, image_static_url: str) -> Optional[Emoji]:
        return self.get("image_static_url", image_static_url)


class EmojiCategoryCache(EntityCache[EmojiCategory]):
    """Category index by ID and case-insensitive name."""

    def __init__(self) -> None:
        super().__init__(lambda c: c.id, {"name": lambda c: c.name.lower()})

    def get_by_name(self, name: str) -> Optional[EmojiCategory]:
        return self.get("name", name.lower())

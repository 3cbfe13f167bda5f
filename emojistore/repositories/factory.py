from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from emojistore.config.settings import Settings
from emojistore.db.dialect import DialectName, dialect_for
from emojistore.db.sqlite_storage import SqliteStorage
from emojistore.db.storage import Storage
from emojistore.domain.errors import ConfigurationError
from emojistore.infrastructure.entity_cache import EmojiCache, EmojiCategoryCache
from emojistore.logging_config import CacheStats

from .sql.categories_sql import EmojiCategoryRepoSql
from .sql.emojis_sql import EmojiRepoSql


@dataclass
class Repositories:
    storage: Storage
    emojis: EmojiRepoSql
    categories: EmojiCategoryRepoSql

    def close(self) -> None:
        for stats in (self.emojis.stats, self.categories.stats):
            if stats is not None:
                stats.log_hit_rate()
        self.storage.close()


def build_storage(settings: Settings) -> Storage:
    """Return the storage backend named by ``settings.db_backend``."""
    dialect = dialect_for(settings.db_backend)
    if dialect.name is DialectName.POSTGRES:
        if not settings.pg_dsn:
            raise ConfigurationError("postgres backend needs a DSN")
        # Lazy import so SQLite-only deployments never load psycopg
        from emojistore.db.postgres_storage import PostgresStorage

        return PostgresStorage(settings.pg_dsn, timeout=settings.db_timeout)

    path = Path(settings.sqlite_path)
    if str(path) == ":memory:":
        raise ConfigurationError("in-memory SQLite is not supported; use a file path")
    path.parent.mkdir(parents=True, exist_ok=True)
    return SqliteStorage(path, timeout=settings.db_timeout)


def build_repositories(settings: Settings, storage: Storage | None = None) -> Repositories:
    """Wire both repositories to one storage and one cache per entity kind."""
    storage = storage if storage is not None else build_storage(settings)
    return Repositories(
        storage=storage,
        emojis=EmojiRepoSql(storage, EmojiCache(), stats=CacheStats("emoji")),
        categories=EmojiCategoryRepoSql(
            storage, EmojiCategoryCache(), stats=CacheStats("emoji_category")
        ),
    )

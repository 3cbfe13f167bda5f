from __future__ import annotations

from collections.abc import Callable, Generator
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

from emojistore.db.migrate import run_migrations
from emojistore.db.sqlite_storage import SqliteStorage
from emojistore.domain.entities import Emoji, EmojiCategory
from emojistore.infrastructure.entity_cache import EmojiCache, EmojiCategoryCache
from emojistore.repositories.sql.categories_sql import EmojiCategoryRepoSql
from emojistore.repositories.sql.emojis_sql import EmojiRepoSql

T0 = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


@pytest.fixture
def storage(tmp_path: Path) -> Generator[SqliteStorage, None, None]:
    s = SqliteStorage(tmp_path / "emoji.sqlite3")
    run_migrations(s)
    yield s
    s.close()


@pytest.fixture
def emoji_repo(storage: SqliteStorage) -> EmojiRepoSql:
    return EmojiRepoSql(storage, EmojiCache())


@pytest.fixture
def category_repo(storage: SqliteStorage) -> EmojiCategoryRepoSql:
    return EmojiCategoryRepoSql(storage, EmojiCategoryCache())


@pytest.fixture
def make_emoji() -> Callable[..., Emoji]:
    def _make(emoji_id: str, shortcode: str, domain: str | None = None, **kw: Any) -> Emoji:
        host = domain or "local.example"
        fields: dict[str, Any] = {
            "id": emoji_id,
            "shortcode": shortcode,
            "domain": domain,
            "created_at": T0,
            "updated_at": T0,
            "uri": f"https://{host}/emoji/{emoji_id}",
            "image_url": f"https://local.example/media/{emoji_id}.png",
            "image_static_url": f"https://local.example/media/{emoji_id}-static.png",
            "image_content_type": "image/png",
            "image_file_size": 1024,
        }
        fields.update(kw)
        return Emoji(**fields)

    return _make


@pytest.fixture
def make_category() -> Callable[..., EmojiCategory]:
    def _make(category_id: str, name: str) -> EmojiCategory:
        return EmojiCategory(id=category_id, name=name, created_at=T0, updated_at=T0)

    return _make

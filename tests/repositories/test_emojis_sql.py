from __future__ import annotations

import threading

import pytest
from pydantic import ValidationError

from emojistore.db.query import SelectQuery
from emojistore.domain.context import OperationContext
from emojistore.domain.errors import (
    AlreadyExistsError,
    BackendError,
    NotFoundError,
    OperationCancelledError,
    TransactionError,
)
from emojistore.infrastructure.entity_cache import EmojiCache
from emojistore.repositories.sql.emojis_sql import EmojiRepoSql


def _count(storage, table: str, where: str, *args) -> int:
    query = SelectQuery(table).column("COUNT(*)").where(where, *args)
    return storage.select_ids(OperationContext.background(), query)[0]


def _forbid_storage_reads(monkeypatch: pytest.MonkeyPatch, storage) -> None:
    def boom(*a, **kw):
        raise AssertionError("storage read on a cached lookup")

    monkeypatch.setattr(storage, "_fetch", boom)


def test_put_then_lookups_are_served_from_cache(
    emoji_repo, storage, make_emoji, monkeypatch: pytest.MonkeyPatch
) -> None:
    e = make_emoji("01", "blob", "remote.example")
    emoji_repo.put_emoji(e)
    _forbid_storage_reads(monkeypatch, storage)

    assert emoji_repo.get_emoji_by_id("01") == e
    assert emoji_repo.get_emoji_by_uri(e.uri) == e
    assert emoji_repo.get_emoji_by_shortcode_domain("blob", "remote.example") == e
    assert emoji_repo.get_emoji_by_static_url(e.image_static_url) == e


def test_cold_cache_loads_from_storage_with_category(
    storage, make_emoji, make_category, category_repo
) -> None:
    category_repo.put_emoji_category(make_category("c1", "Blobs"))
    writer = EmojiRepoSql(storage, EmojiCache())
    writer.put_emoji(make_emoji("01", "blob", category_id="c1"))

    reader = EmojiRepoSql(storage, EmojiCache())
    loaded = reader.get_emoji_by_shortcode_domain("BLOB", "")
    assert loaded.id == "01"
    assert loaded.domain is None
    assert loaded.category is not None and loaded.category.name == "Blobs"
    assert loaded.created_at.tzinfo is not None
    assert loaded.visible_in_picker is True and loaded.disabled is False
    # Populated for every secondary key
    assert reader.cache.get_by_uri(loaded.uri) is loaded


def test_missing_emoji_is_not_found_and_not_cached(emoji_repo) -> None:
    with pytest.raises(NotFoundError):
        emoji_repo.get_emoji_by_id("nope")
    with pytest.raises(NotFoundError):
        emoji_repo.get_emoji_by_uri("https://nowhere.example/emoji/1")
    assert len(emoji_repo.cache) == 0


def test_duplicate_put_is_already_exists(emoji_repo, make_emoji) -> None:
    emoji_repo.put_emoji(make_emoji("01", "blob"))
    with pytest.raises(AlreadyExistsError):
        emoji_repo.put_emoji(make_emoji("02", "BLOB"))
    with pytest.raises(AlreadyExistsError):
        emoji_repo.put_emoji(make_emoji("01", "other"))


def test_update_invalidates_and_next_read_reloads(emoji_repo, storage, make_emoji) -> None:
    e = make_emoji("01", "blob")
    emoji_repo.put_emoji(e)

    updated = emoji_repo.update_emoji(e.model_copy(update={"disabled": True}), "disabled")
    assert updated.updated_at > e.updated_at
    assert "01" not in emoji_repo.cache

    reloaded = emoji_repo.get_emoji_by_id("01")
    assert reloaded.disabled is True
    assert reloaded.updated_at == updated.updated_at
    assert "01" in emoji_repo.cache


def test_update_writes_only_named_columns(emoji_repo, make_emoji) -> None:
    e = make_emoji("01", "blob")
    emoji_repo.put_emoji(e)
    emoji_repo.update_emoji(
        e.model_copy(update={"visible_in_picker": False, "image_url": "https://x/ignored.png"}),
        "visible_in_picker",
    )
    reloaded = emoji_repo.get_emoji_by_id("01")
    assert reloaded.visible_in_picker is False
    assert reloaded.image_url == e.image_url


def test_update_rejects_unknown_columns(emoji_repo, make_emoji) -> None:
    e = make_emoji("01", "blob")
    emoji_repo.put_emoji(e)
    with pytest.raises(ValueError):
        emoji_repo.update_emoji(e, "category")
    with pytest.raises(ValueError):
        emoji_repo.update_emoji(e, "id")
    assert "01" in emoji_repo.cache


def test_delete_removes_rows_and_links(emoji_repo, storage, make_emoji) -> None:
    emoji_repo.put_emoji(make_emoji("01", "blob"))
    emoji_repo.put_emoji(make_emoji("02", "cat"))
    storage.insert(OperationContext.background(), "status_to_emojis", {"status_id": "s1", "emoji_id": "01"})
    storage.insert(OperationContext.background(), "account_to_emojis", {"account_id": "a1", "emoji_id": "01"})
    storage.insert(OperationContext.background(), "account_to_emojis", {"account_id": "a1", "emoji_id": "02"})

    emoji_repo.delete_emoji_by_id("01")

    assert "01" not in emoji_repo.cache
    assert _count(storage, "emojis", "id = ?", "01") == 0
    assert _count(storage, "status_to_emojis", "emoji_id = ?", "01") == 0
    assert _count(storage, "account_to_emojis", "emoji_id = ?", "01") == 0
    assert _count(storage, "account_to_emojis", "emoji_id = ?", "02") == 1
    with pytest.raises(NotFoundError):
        emoji_repo.get_emoji_by_id("01")


def test_failed_delete_rolls_back_everything_and_keeps_cache(emoji_repo, storage, make_emoji) -> None:
    e = make_emoji("01", "blob")
    emoji_repo.put_emoji(e)
    bg = OperationContext.background()
    storage.insert(bg, "status_to_emojis", {"status_id": "s1", "emoji_id": "01"})
    storage.insert(bg, "account_to_emojis", {"account_id": "a1", "emoji_id": "01"})
    # Fail the second delete step from inside the transaction
    storage.execute_script(
        """
        CREATE TRIGGER fail_account_link_delete BEFORE DELETE ON account_to_emojis
        BEGIN
            SELECT RAISE(ABORT, 'injected failure');
        END;
        """
    )

    with pytest.raises(TransactionError) as excinfo:
        emoji_repo.delete_emoji_by_id("01")
    assert "injected failure" in str(excinfo.value)

    assert _count(storage, "status_to_emojis", "emoji_id = ?", "01") == 1
    assert _count(storage, "account_to_emojis", "emoji_id = ?", "01") == 1
    assert _count(storage, "emojis", "id = ?", "01") == 1
    assert emoji_repo.cache.get_by_id("01") is e


def test_cancelled_context_never_reaches_storage(emoji_repo, storage, make_emoji) -> None:
    emoji_repo.put_emoji(make_emoji("01", "blob"))
    ctx = OperationContext.background()
    ctx.cancel()

    # Cache hits ignore the context
    assert emoji_repo.get_emoji_by_id("01", ctx=ctx).id == "01"

    with pytest.raises(OperationCancelledError):
        emoji_repo.get_emoji_by_id("02", ctx=ctx)
    with pytest.raises(OperationCancelledError):
        emoji_repo.delete_emoji_by_id("01", ctx=ctx)
    assert "01" in emoji_repo.cache
    assert _count(storage, "emojis", "id = ?", "01") == 1


def test_concurrent_cold_reads_converge(storage, make_emoji) -> None:
    EmojiRepoSql(storage, EmojiCache()).put_emoji(make_emoji("01", "blob"))
    repo = EmojiRepoSql(storage, EmojiCache())
    results: list[str] = []
    errors: list[BaseException] = []

    def read() -> None:
        try:
            results.append(repo.get_emoji_by_id("01").id)
        except BaseException as exc:  # pragma: no cover - surfaced below
            errors.append(exc)

    threads = [threading.Thread(target=read) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert not errors
    assert results == ["01"] * 8
    assert len(repo.cache) == 1


def test_remote_lookup_ignores_case_warm_or_cold(storage, make_emoji) -> None:
    warm = EmojiRepoSql(storage, EmojiCache())
    warm.put_emoji(make_emoji("01", "Blob", "Remote.Example"))
    cold = EmojiRepoSql(storage, EmojiCache())

    for repo in (warm, cold):
        assert repo.get_emoji_by_shortcode_domain("blob", "remote.example").id == "01"
        assert repo.get_emoji_by_shortcode_domain("BLOB", "REMOTE.EXAMPLE").id == "01"


def test_domain_case_variants_are_the_same_emoji(emoji_repo, make_emoji) -> None:
    emoji_repo.put_emoji(make_emoji("01", "blob", "remote.example"))
    with pytest.raises(AlreadyExistsError):
        emoji_repo.put_emoji(make_emoji("02", "Blob", "Remote.Example"))


def test_malformed_row_is_backend_error_and_not_cached(emoji_repo, storage, make_emoji) -> None:
    row = make_emoji("01", "blob").to_row()
    row["image_file_size"] = -1
    storage.insert(OperationContext.background(), "emojis", row)

    with pytest.raises(BackendError) as excinfo:
        emoji_repo.get_emoji_by_id("01")
    assert isinstance(excinfo.value.__cause__, ValidationError)
    assert "01" not in emoji_repo.cache

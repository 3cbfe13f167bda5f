from __future__ import annotations

import logging

import pytest

from emojistore.domain.errors import NoEntriesError, NotFoundError, OperationCancelledError
from emojistore.repositories.hydration import hydrate_ids


def test_empty_ids_is_no_entries_without_lookups() -> None:
    def resolve(_: str) -> str:
        raise AssertionError("must not resolve")

    with pytest.raises(NoEntriesError):
        hydrate_ids([], resolve, kind="emoji")


def test_failed_ids_are_skipped_and_logged(
    caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
) -> None:
    def resolve(entity_id: str) -> str:
        if entity_id == "b":
            raise NotFoundError("gone")
        return entity_id.upper()

    # get_logger() may have detached the package logger from root in another test
    monkeypatch.setattr(logging.getLogger("emojistore"), "propagate", True)
    with caplog.at_level(logging.WARNING, logger="emojistore.repositories.hydration"):
        result = hydrate_ids(["a", "b", "c"], resolve, kind="emoji")

    assert result == ["A", "C"]
    assert len(caplog.records) == 1
    assert caplog.records[0].entity_id == "b"


def test_all_failed_is_empty_not_no_entries() -> None:
    def resolve(entity_id: str) -> str:
        raise NotFoundError(entity_id)

    assert hydrate_ids(["a"], resolve, kind="emoji") == []


def test_cancellation_aborts_batch() -> None:
    seen: list[str] = []

    def resolve(entity_id: str) -> str:
        seen.append(entity_id)
        raise OperationCancelledError("operation cancelled")

    with pytest.raises(OperationCancelledError):
        hydrate_ids(["a", "b"], resolve, kind="emoji")
    assert seen == ["a"]


def test_unexpected_errors_propagate() -> None:
    def resolve(entity_id: str) -> str:
        raise KeyError(entity_id)

    with pytest.raises(KeyError):
        hydrate_ids(["a"], resolve, kind="emoji")

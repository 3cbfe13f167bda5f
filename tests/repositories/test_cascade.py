from __future__ import annotations

import pytest

from emojistore.db.dialect import SqliteDialect
from emojistore.domain.context import OperationContext
from emojistore.domain.errors import BackendError, OperationCancelledError, TransactionError
from emojistore.repositories.cascade import EMOJI_DELETE_STEPS, CascadingDeleter, DeleteStep


class _RecordingStorage:
    dialect = SqliteDialect()

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.batches: list[list[tuple]] = []

    def run_in_transaction(self, ctx, statements) -> None:
        self.batches.append([s.render(self.dialect) for s in statements])
        if self.error is not None:
            raise self.error


def test_steps_run_junctions_first_in_one_transaction() -> None:
    storage = _RecordingStorage()
    CascadingDeleter(storage, EMOJI_DELETE_STEPS).delete(OperationContext.background(), "01")

    assert storage.batches == [
        [
            ("DELETE FROM status_to_emojis WHERE (emoji_id = ?)", ("01",)),
            ("DELETE FROM account_to_emojis WHERE (emoji_id = ?)", ("01",)),
            ("DELETE FROM emojis WHERE (id = ?)", ("01",)),
        ]
    ]


def test_backend_failure_becomes_transaction_error() -> None:
    cause = BackendError("disk I/O error", backend="sqlite")
    deleter = CascadingDeleter(_RecordingStorage(cause), EMOJI_DELETE_STEPS)
    with pytest.raises(TransactionError) as excinfo:
        deleter.delete(OperationContext.background(), "01")
    assert excinfo.value.__cause__ is cause


def test_cancellation_is_not_wrapped() -> None:
    deleter = CascadingDeleter(_RecordingStorage(OperationCancelledError("cancelled")), EMOJI_DELETE_STEPS)
    with pytest.raises(OperationCancelledError):
        deleter.delete(OperationContext.background(), "01")


def test_requires_steps() -> None:
    with pytest.raises(ValueError):
        CascadingDeleter(_RecordingStorage(), [])
    assert DeleteStep("t", "c").statement("x").table == "t"

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from emojistore.db.query import DeleteQuery
from emojistore.db.storage import Storage
from emojistore.domain.context import OperationContext
from emojistore.domain.errors import OperationCancelledError, RepositoryError, TransactionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeleteStep:
    """Delete every row of ``table`` whose ``column`` equals the entity ID."""

    table: str
    column: str

    def statement(self, entity_id: str) -> DeleteQuery:
        return DeleteQuery(self.table).where(f"{self.column} = ?", entity_id)


# Junction rows first: they reference emojis.id.
EMOJI_DELETE_STEPS: tuple[DeleteStep, ...] = (
    DeleteStep("status_to_emojis", "emoji_id"),
    DeleteStep("account_to_emojis", "emoji_id"),
    DeleteStep("emojis", "id"),
)


class CascadingDeleter:
    """Runs an ordered list of delete steps as one transaction.

    On failure nothing is removed and :class:`TransactionError` is raised (the
    backend error is chained as ``__cause__``). Cancellation is re-raised as is.
    Callers touch their caches only after :meth:`delete` returns.
    """

    def __init__(self, storage: Storage, steps: Sequence[DeleteStep]) -> None:
        if not steps:
            raise ValueError("cascading delete needs at least one step")
        self._storage = storage
        self._steps = tuple(steps)

    @property
    def steps(self) -> tuple[DeleteStep, ...]:
        return self._steps

    def delete(self, ctx: OperationContext, entity_id: str) -> None:
        statements = [step.statement(entity_id) for step in self._steps]
        try:
            self._storage.run_in_transaction(ctx, statements)
        except OperationCancelledError:
            raise
        except RepositoryError as exc:
            logger.error(
                "Cascading delete rolled back: %s",
                exc,
                extra={"entity_id": entity_id, "tables": [s.table for s in self._steps]},
            )
            raise TransactionError(f"delete of {entity_id!r} rolled back: {exc}") from exc

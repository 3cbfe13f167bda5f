from __future__ import annotations

import logging
from typing import Callable, Sequence, TypeVar

from emojistore.domain.errors import NoEntriesError, OperationCancelledError, RepositoryError

T = TypeVar("T")

logger = logging.getLogger(__name__)


def hydrate_ids(ids: Sequence[str], resolve: Callable[[str], T], *, kind: str) -> list[T]:
    """Resolve ``ids`` to entities in input order.

    - An empty ``ids`` raises :class:`NoEntriesError` without calling ``resolve``.
    - An ID whose resolution raises a :class:`RepositoryError` is skipped and
      logged as a warning; the rest of the batch still resolves.
    - Cancellation aborts the whole batch.
    """
    if not ids:
        raise NoEntriesError(f"no {kind} entries")

    entities: list[T] = []
    for entity_id in ids:
        try:
            entities.append(resolve(entity_id))
        except OperationCancelledError:
            raise
        except RepositoryError as exc:
            logger.warning(
                "Skipping %s %s: %s",
                kind,
                entity_id,
                exc,
                extra={"entity_id": entity_id, "kind": kind},
            )
    return entities

"""Error taxonomy raised across the repository boundary.

Storage backends translate their driver exceptions into these types; callers
never see ``sqlite3`` or ``psycopg`` errors directly.
"""

from __future__ import annotations


class RepositoryError(RuntimeError):
    """Base class for every normalised repository failure."""


class NotFoundError(RepositoryError):
    """A single-entity query matched no row."""


class NoEntriesError(RepositoryError):
    """A batch lookup started from an empty ID set and never reached storage."""


class BackendError(RepositoryError):
    """Any other translated storage failure (connectivity, constraints, ...)."""

    def __init__(self, message: str, *, backend: str | None = None) -> None:
        super().__init__(message)
        self.backend = backend


class AlreadyExistsError(BackendError):
    """A unique constraint rejected an insert or update."""


class TransactionError(RepositoryError):
    """A transactional unit was rolled back; no row was changed."""


class OperationCancelledError(RepositoryError):
    """The operation context was cancelled or its deadline passed."""


class ConfigurationError(RuntimeError):
    """Unsupported backend or dialect. Raised at construction, never per call."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping, Sequence

from emojistore.domain.context import OperationContext
from emojistore.domain.errors import NotFoundError, RepositoryError

from .dialect import DialectStrategy
from .query import InsertQuery, SelectQuery, Statement, UpdateQuery

Row = dict[str, Any]


class Storage(ABC):
    """Relational storage collaborator used by the repositories.

    Implementations own connection handling, honour the operation context on
    every call and translate driver errors with :meth:`translate_error`, so only
    :mod:`emojistore.domain.errors` types escape.
    """

    dialect: DialectStrategy

    def insert(self, ctx: OperationContext, table: str, values: Mapping[str, Any]) -> None:
        """Insert one row."""
        self._execute(ctx, InsertQuery(table, values))

    def update_columns(
        self, ctx: OperationContext, table: str, row_id: str, values: Mapping[str, Any]
    ) -> int:
        """Write ``values`` to the row with primary key ``row_id``; return rows affected."""
        return self._execute(ctx, UpdateQuery(table, values).where("id = ?", row_id))

    def select_one(self, ctx: OperationContext, query: SelectQuery) -> Row:
        """Return the first row of ``query``; raise :class:`NotFoundError` when empty."""
        rows = self._fetch(ctx, query)
        if not rows:
            raise NotFoundError("no rows in result set")
        return rows[0]

    def select_ids(self, ctx: OperationContext, query: SelectQuery) -> list[str]:
        """Return the first column of every row, in query order."""
        return [next(iter(row.values())) for row in self._fetch(ctx, query)]

    @abstractmethod
    def run_in_transaction(self, ctx: OperationContext, statements: Sequence[Statement]) -> None:
        """Execute ``statements`` in order as one atomic unit.

        Either every statement commits or the transaction is rolled back and the
        translated error raised. The transaction never outlives this call.
        """

    @abstractmethod
    def execute_script(self, sql: str) -> None:
        """Run a multi-statement DDL script (migrations)."""

    @abstractmethod
    def translate_error(self, exc: BaseException) -> RepositoryError:
        """Map a driver exception onto the repository error taxonomy."""

    @abstractmethod
    def _execute(self, ctx: OperationContext, statement: Statement) -> int: ...

    @abstractmethod
    def _fetch(self, ctx: OperationContext, query: SelectQuery) -> list[Row]: ...

    def close(self) -> None:
        """Release any pooled connections."""

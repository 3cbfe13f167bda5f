from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator, Sequence

import psycopg  # type: ignore
from psycopg import errors as pg_errors
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from emojistore.domain.context import OperationContext
from emojistore.domain.errors import (
    AlreadyExistsError,
    BackendError,
    OperationCancelledError,
    RepositoryError,
)

from .dialect import PostgresDialect
from .query import SelectQuery, Statement
from .storage import Row, Storage

POOL_MIN_SIZE = 1
POOL_MAX_SIZE = 10


def _timeout_ms(ctx: OperationContext, default_seconds: float) -> int:
    """Statement timeout for this call: the context's remaining time, capped by the default."""
    remaining = ctx.remaining()
    seconds = default_seconds if remaining is None else min(default_seconds, remaining)
    return max(1, int(seconds * 1000))


class PostgresStorage(Storage):
    """PostgreSQL implementation of :class:`Storage` using ``psycopg``.

    Connections come from a thread-safe ``psycopg_pool.ConnectionPool`` opened
    on first use, so constructing the storage never touches the network. Each
    checkout sets ``statement_timeout`` from the context deadline, so a slow
    query is aborted by the server and surfaces as
    :class:`OperationCancelledError`.
    """

    dialect = PostgresDialect()

    def __init__(
        self,
        dsn: str,
        *,
        timeout: float = 10.0,
        min_size: int = POOL_MIN_SIZE,
        max_size: int = POOL_MAX_SIZE,
    ) -> None:
        # SQLAlchemy-style URLs are accepted for convenience.
        self._dsn = dsn.replace("postgresql+psycopg", "postgresql")
        self._timeout = float(timeout)
        self._min_size = min_size
        self._max_size = max_size
        self._pool: ConnectionPool | None = None
        self._pool_lock = threading.Lock()

    def _get_pool(self) -> ConnectionPool:
        with self._pool_lock:
            if self._pool is None:
                pool = ConnectionPool(
                    self._dsn,
                    min_size=self._min_size,
                    max_size=self._max_size,
                    timeout=self._timeout,
                    kwargs={
                        "autocommit": True,
                        "row_factory": dict_row,
                        "connect_timeout": max(1, int(self._timeout)),
                    },
                    open=False,
                )
                pool.open()
                self._pool = pool
            return self._pool

    @contextmanager
    def _connect(self, ctx: OperationContext) -> Iterator[psycopg.Connection]:
        ctx.check()
        try:
            # PoolTimeout is an OperationalError, so a starved pool is translated too.
            with self._get_pool().connection() as conn:
                conn.execute(f"SET statement_timeout = {_timeout_ms(ctx, self._timeout)}")
                yield conn
        except pg_errors.QueryCanceled as exc:
            raise OperationCancelledError(f"postgres statement cancelled: {exc}") from exc
        except psycopg.Error as exc:
            raise self.translate_error(exc) from exc

    def _execute(self, ctx: OperationContext, statement: Statement) -> int:
        sql, params = statement.render(self.dialect)
        with self._connect(ctx) as conn:
            cur = conn.execute(sql, params)
            return cur.rowcount

    def _fetch(self, ctx: OperationContext, query: SelectQuery) -> list[Row]:
        sql, params = query.render(self.dialect)
        with self._connect(ctx) as conn:
            cur = conn.execute(sql, params)
            return list(cur.fetchall())

    def run_in_transaction(self, ctx: OperationContext, statements: Sequence[Statement]) -> None:
        with self._connect(ctx) as conn:
            # conn.transaction() commits on clean exit and rolls back on any exception.
            with conn.transaction():
                for statement in statements:
                    ctx.check()
                    sql, params = statement.render(self.dialect)
                    conn.execute(sql, params)

    def execute_script(self, sql: str) -> None:
        with self._connect(OperationContext.background()) as conn:
            conn.execute(sql)

    def translate_error(self, exc: BaseException) -> RepositoryError:
        if isinstance(exc, RepositoryError):
            return exc
        if isinstance(exc, pg_errors.UniqueViolation):
            return AlreadyExistsError(str(exc), backend="postgres")
        return BackendError(str(exc), backend="postgres")

    def close(self) -> None:
        with self._pool_lock:
            if self._pool is not None:
                self._pool.close()
                self._pool = None

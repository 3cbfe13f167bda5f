from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator, Sequence

from emojistore.domain.context import OperationContext
from emojistore.domain.errors import (
    AlreadyExistsError,
    BackendError,
    ConfigurationError,
    OperationCancelledError,
    RepositoryError,
)

from .dialect import SqliteDialect
from .query import SelectQuery, Statement
from .storage import Row, Storage

logger = logging.getLogger(__name__)

# VM instructions between cancellation checks while a statement runs.
PROGRESS_INTERVAL = 1000


def _adapt(params: Sequence[Any]) -> tuple[Any, ...]:
    # sqlite3's implicit datetime adapter is deprecated; store ISO-8601 text.
    return tuple(p.isoformat() if isinstance(p, datetime) else p for p in params)


class SqliteStorage(Storage):
    """SQLite implementation of :class:`Storage`.

    Each thread gets its own connection (opened lazily in autocommit mode with
    foreign keys on), so concurrent callers never share a cursor. A running
    statement is interrupted once the operation context is done. In-memory
    databases are rejected because they cannot be shared between threads.

    Example:
        >>> storage = SqliteStorage(tmp_path / "example.sqlite3")
        >>> storage.execute_script("CREATE TABLE t (id TEXT PRIMARY KEY)")
        >>> storage.insert(OperationContext.background(), "t", {"id": "a"})
        >>> storage.select_ids(OperationContext.background(), SelectQuery("t").column("id"))
        ['a']
    """

    dialect = SqliteDialect()

    def __init__(self, path: str | Path, *, timeout: float = 10.0) -> None:
        if str(path) == ":memory:":
            # Every thread would open its own private, empty database.
            raise ConfigurationError("in-memory SQLite is not supported; use a file path")
        self._path = str(path)
        self._timeout = float(timeout)
        self._local = threading.local()
        self._connections: list[sqlite3.Connection] = []
        self._connections_lock = threading.Lock()

    def _conn(self) -> sqlite3.Connection:
        conn: sqlite3.Connection | None = getattr(self._local, "conn", None)
        if conn is None:
            try:
                conn = sqlite3.connect(
                    self._path,
                    timeout=self._timeout,
                    isolation_level=None,
                    check_same_thread=False,
                )
                conn.row_factory = sqlite3.Row
                conn.execute("PRAGMA foreign_keys = ON;")
            except sqlite3.Error as exc:
                if conn is not None:
                    conn.close()
                raise self.translate_error(exc) from exc
            self._local.conn = conn
            with self._connections_lock:
                self._connections.append(conn)
        return conn

    @contextmanager
    def _guard(self, ctx: OperationContext, conn: sqlite3.Connection) -> Iterator[None]:
        ctx.check()
        conn.set_progress_handler(lambda: 1 if ctx.done() else 0, PROGRESS_INTERVAL)
        try:
            yield
        except sqlite3.Error as exc:
            if ctx.done():
                raise OperationCancelledError(f"sqlite statement interrupted: {exc}") from exc
            raise self.translate_error(exc) from exc
        finally:
            conn.set_progress_handler(None, 0)

    def _execute(self, ctx: OperationContext, statement: Statement) -> int:
        sql, params = statement.render(self.dialect)
        conn = self._conn()
        with self._guard(ctx, conn):
            cur = conn.execute(sql, _adapt(params))
            return cur.rowcount

    def _fetch(self, ctx: OperationContext, query: SelectQuery) -> list[Row]:
        sql, params = query.render(self.dialect)
        conn = self._conn()
        with self._guard(ctx, conn):
            cur = conn.execute(sql, _adapt(params))
            return [dict(row) for row in cur.fetchall()]

    def run_in_transaction(self, ctx: OperationContext, statements: Sequence[Statement]) -> None:
        conn = self._conn()
        with self._guard(ctx, conn):
            conn.execute("BEGIN")
            try:
                for statement in statements:
                    ctx.check()
                    sql, params = statement.render(self.dialect)
                    conn.execute(sql, _adapt(params))
                conn.set_progress_handler(None, 0)
                conn.execute("COMMIT")
            except BaseException:
                conn.set_progress_handler(None, 0)
                # An interrupted write may already have rolled the transaction back.
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                logger.debug("sqlite transaction rolled back", extra={"path": self._path})
                raise

    def execute_script(self, sql: str) -> None:
        try:
            self._conn().executescript(sql)
        except sqlite3.Error as exc:
            raise self.translate_error(exc) from exc

    def translate_error(self, exc: BaseException) -> RepositoryError:
        if isinstance(exc, RepositoryError):
            return exc
        if isinstance(exc, sqlite3.IntegrityError) and "UNIQUE" in str(exc).upper():
            return AlreadyExistsError(str(exc), backend="sqlite")
        return BackendError(str(exc), backend="sqlite")

    def close(self) -> None:
        with self._connections_lock:
            for conn in self._connections:
                conn.close()
            self._connections.clear()
        self._local = threading.local()

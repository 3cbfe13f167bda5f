"""Minimal SQL builders rendered per dialect.

Clauses are written with ``?`` markers; :meth:`render` swaps them for the
dialect's placeholder, so a query is built once and runs on either backend.
Identifiers are always code-supplied, values always bound.
"""

from __future__ import annotations

from typing import Any, Mapping, Union

from .dialect import DialectStrategy

Params = tuple[Any, ...]


def _bind(clause: str, dialect: DialectStrategy) -> str:
    if dialect.placeholder == "?":
        return clause
    return clause.replace("?", dialect.placeholder)


class _Filtered:
    def __init__(self) -> None:
        self._wheres: list[tuple[str, Params]] = []

    def where(self, clause: str, *args: Any):
        """AND another predicate onto the query; returns ``self`` for chaining."""
        self._wheres.append((clause, args))
        return self

    def _render_where(self, dialect: DialectStrategy) -> tuple[str, Params]:
        if not self._wheres:
            return "", ()
        parts = [f"({_bind(clause, dialect)})" for clause, _ in self._wheres]
        params: list[Any] = []
        for _, args in self._wheres:
            params.extend(args)
        return " WHERE " + " AND ".join(parts), tuple(params)


class SelectQuery(_Filtered):
    """``SELECT`` over a table expression or a wrapped subquery.

    >>> from emojistore.db.dialect import SqliteDialect
    >>> q = SelectQuery("emojis AS emoji").column("emoji.id").where("emoji.uri = ?", "u")
    >>> q.render(SqliteDialect())
    ('SELECT emoji.id FROM emojis AS emoji WHERE (emoji.uri = ?)', ('u',))
    """

    def __init__(self, source: Union[str, "SelectQuery"], alias: str | None = None) -> None:
        super().__init__()
        if isinstance(source, SelectQuery) and not alias:
            raise ValueError("a subquery source needs an alias")
        self._source = source
        self._alias = alias
        self._columns: list[str] = []
        self._joins: list[str] = []
        self._order: list[str] = []
        self._limit: int | None = None

    def column(self, *exprs: str) -> "SelectQuery":
        self._columns.extend(exprs)
        return self

    def join(self, expr: str) -> "SelectQuery":
        self._joins.append(expr)
        return self

    def order(self, *exprs: str) -> "SelectQuery":
        self._order.extend(exprs)
        return self

    def limit(self, n: int) -> "SelectQuery":
        self._limit = int(n)
        return self

    def render(self, dialect: DialectStrategy) -> tuple[str, Params]:
        params: list[Any] = []
        if isinstance(self._source, SelectQuery):
            sub_sql, sub_params = self._source.render(dialect)
            source = f"({sub_sql}) AS {self._alias}"
            params.extend(sub_params)
        else:
            source = self._source if not self._alias else f"{self._source} AS {self._alias}"

        sql = f"SELECT {', '.join(self._columns) or '*'} FROM {source}"
        for join in self._joins:
            sql += f" {join}"
        where_sql, where_params = self._render_where(dialect)
        sql += where_sql
        params.extend(where_params)
        if self._order:
            sql += " ORDER BY " + ", ".join(self._order)
        if self._limit is not None:
            sql += f" LIMIT {self._limit}"
        return sql, tuple(params)


class DeleteQuery(_Filtered):
    """
    >>> from emojistore.db.dialect import PostgresDialect
    >>> DeleteQuery("emojis").where("id = ?", "01").render(PostgresDialect())
    ('DELETE FROM emojis WHERE (id = %s)', ('01',))
    """

    def __init__(self, table: str) -> None:
        super().__init__()
        self.table = table

    def render(self, dialect: DialectStrategy) -> tuple[str, Params]:
        where_sql, params = self._render_where(dialect)
        return f"DELETE FROM {self.table}{where_sql}", params


class InsertQuery:
    def __init__(self, table: str, values: Mapping[str, Any]) -> None:
        if not values:
            raise ValueError("insert needs at least one column")
        self.table = table
        self.values = dict(values)

    def render(self, dialect: DialectStrategy) -> tuple[str, Params]:
        columns = ", ".join(self.values)
        marks = ", ".join(dialect.placeholder for _ in self.values)
        return f"INSERT INTO {self.table} ({columns}) VALUES ({marks})", tuple(self.values.values())


class UpdateQuery(_Filtered):
    def __init__(self, table: str, values: Mapping[str, Any]) -> None:
        super().__init__()
        if not values:
            raise ValueError("update needs at least one column")
        self.table = table
        self.values = dict(values)

    def render(self, dialect: DialectStrategy) -> tuple[str, Params]:
        assignments = ", ".join(f"{column} = {dialect.placeholder}" for column in self.values)
        where_sql, where_params = self._render_where(dialect)
        return (
            f"UPDATE {self.table} SET {assignments}{where_sql}",
            tuple(self.values.values()) + where_params,
        )


Statement = Union[SelectQuery, DeleteQuery, InsertQuery, UpdateQuery]
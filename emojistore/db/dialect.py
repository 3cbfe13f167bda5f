"""SQL dialect strategies.

Only the derived ``shortcode@domain`` sort key and the parameter placeholder
differ between the supported backends. A strategy is picked once, when the
storage is constructed; query-building code never branches on the backend.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import ClassVar

from emojistore.domain.errors import ConfigurationError


class DialectName(str, Enum):
    SQLITE = "sqlite"
    POSTGRES = "pg"


class DialectStrategy(ABC):
    name: ClassVar[DialectName]
    placeholder: ClassVar[str]

    @abstractmethod
    def sort_key_expression(self, shortcode_column: str, domain_column: str) -> str:
        """Return ``lower(shortcode || '@' || coalesce(domain, ''))`` in this dialect."""


class SqliteDialect(DialectStrategy):
    """
    >>> SqliteDialect().sort_key_expression("emoji.shortcode", "emoji.domain")
    "LOWER(emoji.shortcode || '@' || COALESCE(emoji.domain, ''))"
    """

    name = DialectName.SQLITE
    placeholder = "?"

    def sort_key_expression(self, shortcode_column: str, domain_column: str) -> str:
        return f"LOWER({shortcode_column} || '@' || COALESCE({domain_column}, ''))"


class PostgresDialect(DialectStrategy):
    name = DialectName.POSTGRES
    placeholder = "%s"

    def sort_key_expression(self, shortcode_column: str, domain_column: str) -> str:
        # Byte-wise collation so ordering matches SQLite's BINARY comparison.
        return f"LOWER(CONCAT({shortcode_column}, '@', COALESCE({domain_column}, ''))) COLLATE \"C\""


_DIALECTS: dict[str, type[DialectStrategy]] = {
    DialectName.SQLITE.value: SqliteDialect,
    DialectName.POSTGRES.value: PostgresDialect,
    "postgres": PostgresDialect,
    "postgresql": PostgresDialect,
}


def dialect_for(name: str) -> DialectStrategy:
    """Return the strategy for a backend name; unknown names are a config error."""
    try:
        return _DIALECTS[name.lower()]()
    except KeyError:
        raise ConfigurationError(f"unsupported database dialect: {name!r}") from None

"""Logging configuration for emojistore.

Provides a JSON formatted logger named ``emojistore`` and simple cache statistics.
Modules log through ``logging.getLogger(__name__)``, which nests under this logger.
"""

from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

LOG_NAME = "emojistore"
LOG_FILE = Path("logs/emojistore.log")
MAX_BYTES = 5 * 1024 * 1024
BACKUP_COUNT = 5

# Attributes of a bare LogRecord, plus the two set while formatting. Anything
# else on a record came in through ``extra=``.
DEFAULT_LOG_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
}


class JsonFormatter(logging.Formatter):
    """Formatter returning log records as JSON strings."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - short description
        base: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, timezone.utc).isoformat(timespec="seconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extras = {
            key: value
            for key, value in record.__dict__.items()
            if key not in DEFAULT_LOG_RECORD_ATTRS
        }
        entity_id = extras.pop("entity_id", None)
        if entity_id is not None:
            base["entity_id"] = entity_id
        if extras:
            base["extra"] = extras
        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(base, ensure_ascii=False, default=str)


def get_logger() -> logging.Logger:
    """Return the configured ``emojistore`` logger."""
    logger = logging.getLogger(LOG_NAME)
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)

    formatter = JsonFormatter()

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(logging.INFO)
    stream_handler.setFormatter(formatter)

    LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        LOG_FILE,
        maxBytes=MAX_BYTES,
        backupCount=BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)

    logger.addHandler(stream_handler)
    logger.addHandler(file_handler)
    logger.propagate = False
    return logger


class CacheStats:
    """Thread-safe cache hit/miss statistics collector."""

    def __init__(self, name: str = "cache") -> None:
        self.name = name
        self._hits = 0
        self._misses = 0
        self._lock = threading.Lock()
        self._logger = logging.getLogger(f"{LOG_NAME}.cache")

    def record_hit(self) -> None:
        """Record a cache hit."""
        with self._lock:
            self._hits += 1

    def record_miss(self) -> None:
        """Record a cache miss."""
        with self._lock:
            self._misses += 1

    @property
    def hits(self) -> int:
        return self._hits

    @property
    def misses(self) -> int:
        return self._misses

    @property
    def hit_rate(self) -> float:
        """Return the cache hit rate as a percentage."""
        with self._lock:
            total = self._hits + self._misses
            return (self._hits / total * 100) if total else 0.0

    def log_hit_rate(self) -> None:
        """Log the current cache hit rate."""
        self._logger.info(
            "Cache hit-rate",
            extra={"cache": self.name, "hit_rate": round(self.hit_rate, 2)},
        )

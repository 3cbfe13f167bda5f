"""Settings for the emoji store backends.

Environment variables are loaded from a ``.env`` file using ``python-dotenv``
and exposed through a frozen Pydantic settings object.
"""

from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

# Load environment variables from a .env file if present
load_dotenv()

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
SUPPORTED_BACKENDS = ("sqlite", "postgres")
DEFAULT_BACKEND = "sqlite"
DEFAULT_SQLITE_PATH = os.path.join("data", "emojistore.sqlite3")
DB_TIMEOUT = 10.0  # seconds


class Settings(BaseModel):
    """Immutable settings object used to wire storage and repositories."""

    db_backend: str = DEFAULT_BACKEND
    sqlite_path: str = DEFAULT_SQLITE_PATH
    pg_dsn: str | None = None
    db_timeout: float = DB_TIMEOUT

    model_config = ConfigDict(frozen=True)


def load_settings() -> Settings:
    """Construct a ``Settings`` instance based on environment variables."""

    backend = os.getenv("EMOJISTORE_DB_BACKEND", DEFAULT_BACKEND).strip().lower()
    if backend not in SUPPORTED_BACKENDS:
        raise RuntimeError(
            f"EMOJISTORE_DB_BACKEND must be one of {', '.join(SUPPORTED_BACKENDS)}; got {backend!r}"
        )

    raw_timeout = os.getenv("EMOJISTORE_DB_TIMEOUT")
    try:
        timeout = float(raw_timeout) if raw_timeout else DB_TIMEOUT
    except ValueError as exc:
        raise RuntimeError(f"EMOJISTORE_DB_TIMEOUT is not a number: {raw_timeout!r}") from exc
    if timeout <= 0:
        raise RuntimeError("EMOJISTORE_DB_TIMEOUT must be positive")

    pg_dsn = os.getenv("EMOJISTORE_PG_DSN") or None
    if backend == "postgres" and not pg_dsn:
        raise RuntimeError("EMOJISTORE_PG_DSN is required when EMOJISTORE_DB_BACKEND=postgres")

    return Settings(
        db_backend=backend,
        sqlite_path=os.getenv("EMOJISTORE_SQLITE_PATH", DEFAULT_SQLITE_PATH),
        pg_dsn=pg_dsn,
        db_timeout=timeout,
    )

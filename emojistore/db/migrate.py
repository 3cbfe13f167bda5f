"""Versioned schema migration runner."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

from emojistore.domain.context import OperationContext

from .query import SelectQuery
from .storage import Storage

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


def applied_versions(storage: Storage, ctx: OperationContext) -> set[str]:
    storage.execute_script("CREATE TABLE IF NOT EXISTS schema_migrations (version TEXT PRIMARY KEY)")
    return set(storage.select_ids(ctx, SelectQuery("schema_migrations").column("version")))


def available_migrations(directory: Path = MIGRATIONS_DIR) -> Iterable[tuple[str, Path]]:
    pattern = re.compile(r"V(\d+)__.+\.sql$")
    found = []
    for path in directory.glob("V*__*.sql"):
        match = pattern.match(path.name)
        if match:
            found.append((match.group(1), path))
    # Numeric order so V10 runs after V9.
    return sorted(found, key=lambda item: int(item[0]))


def run_migrations(
    storage: Storage,
    ctx: OperationContext | None = None,
    *,
    directory: Path = MIGRATIONS_DIR,
) -> list[str]:
    """Apply pending migrations and return the versions applied."""
    ctx = ctx if ctx is not None else OperationContext.background()
    done = applied_versions(storage, ctx)
    applied: list[str] = []
    for version, path in available_migrations(directory):
        if version in done:
            continue
        storage.execute_script(path.read_text(encoding="utf-8"))
        storage.insert(ctx, "schema_migrations", {"version": version})
        logger.info("applied migration", extra={"version": version, "file": path.name})
        applied.append(version)
    return applied


if __name__ == "__main__":  # pragma: no cover
    from emojistore.config.settings import load_settings
    from emojistore.logging_config import get_logger
    from emojistore.repositories.factory import build_storage

    get_logger()
    run_migrations(build_storage(load_settings()))

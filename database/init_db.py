"""Database initialization and connection helpers."""
from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from core.config import get_config
from core.logging import get_logger, setup_logging


_PROJECT_ROOT = Path(__file__).resolve().parents[1]
_SCHEMA_PATH = Path(__file__).with_name("schema.sql")


logger = get_logger(__name__)


def init_database(database_url: Optional[str] = None, *, skip_if_exists: bool = True) -> sqlite3.Connection:
    """Create the reference record tables at the configured database URL."""

    config = get_config()
    target_url = _normalize_database_url(database_url, config.database_url)
    location = _sqlite_location(target_url)

    conn = sqlite3.connect(location)
    conn.execute("PRAGMA foreign_keys = ON")
    conn.row_factory = sqlite3.Row

    if skip_if_exists and _database_has_tables(conn):
        return conn

    conn.executescript(_SCHEMA_PATH.read_text(encoding="utf-8"))
    conn.commit()
    return conn


def get_db_connection(database_url: Optional[str] = None) -> sqlite3.Connection:
    """Return a SQLite connection respecting configuration defaults."""

    config = get_config()
    target_url = _normalize_database_url(database_url, config.database_url)
    location = _sqlite_location(target_url)

    conn = sqlite3.connect(location)
    conn.execute("PRAGMA foreign_keys = ON")
    conn.row_factory = sqlite3.Row
    return conn


def get_readonly_connection(database_url: Optional[str] = None) -> sqlite3.Connection:
    """Open an existing SQLite database read-only; nothing is created on disk."""

    config = get_config()
    target_url = _normalize_database_url(database_url, config.database_url)
    location = _sqlite_location(target_url, create_parent=False)
    if location == ":memory:":
        raise RuntimeError("An in-memory database cannot be shared with a read-only connection.")

    conn = sqlite3.connect(f"{Path(location).as_uri()}?mode=ro", uri=True)
    conn.row_factory = sqlite3.Row
    return conn


def _database_has_tables(conn: sqlite3.Connection) -> bool:
    cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table' LIMIT 1")
    has_tables = cursor.fetchone() is not None
    cursor.close()
    return has_tables


def _normalize_database_url(candidate: Optional[str], default: str) -> str:
    if not candidate:
        return default
    if "://" in candidate:
        return candidate

    db_path = Path(candidate)
    if not db_path.is_absolute():
        db_path = (_PROJECT_ROOT / db_path).resolve()

    return f"sqlite:///{db_path.as_posix()}"


def _sqlite_location(database_url: str, *, create_parent: bool = True) -> str:
    parsed = urlparse(database_url)
    backend = parsed.scheme or "sqlite"

    if backend != "sqlite":
        raise RuntimeError("Only SQLite record stores are supported by the bundled repository.")

    if parsed.path in ("", "/") and parsed.netloc:
        path = parsed.netloc
    else:
        path = parsed.path

    if path in (":memory:", "/:memory:"):
        return ":memory:"

    if not parsed.netloc:
        if path.startswith("//"):
            path = path[1:]
        elif path.startswith("/"):
            path = path[1:]

    db_path = Path(path)
    if not db_path.is_absolute():
        db_path = (_PROJECT_ROOT / db_path).resolve()

    if create_parent:
        db_path.parent.mkdir(parents=True, exist_ok=True)
    return str(db_path)


__all__ = ["init_database", "get_db_connection", "get_readonly_connection"]


if __name__ == "__main__":  # pragma: no cover - convenience CLI
    setup_logging()
    connection = init_database(skip_if_exists=False)
    try:
        cursor = connection.execute("SELECT name FROM sqlite_master WHERE type='table'")
        tables = ", ".join(sorted(row[0] for row in cursor.fetchall()))
        logger.info("database_initialised", tables=tables)
    finally:
        connection.close()

"""
Database connection and initialization.
"""
from __future__ import annotations

import sqlite3
from pathlib import Path

from league_site import config
from league_site.logging import get_logger

from .schema import all_schema_sql

log = get_logger("persistence")

_db_path: Path | None = None


def set_db_path(path: str | Path) -> None:
    """Set the database path. Call before first get_connection if not using the configured one."""
    global _db_path
    _db_path = Path(path)


def get_db_path() -> Path:
    """Return the current database path."""
    if _db_path is not None:
        return _db_path
    return config.DB_PATH


def get_connection(db_path: str | Path | None = None) -> sqlite3.Connection:
    """
    Return a new SQLite connection with Row access by column name.
    Use as context manager or ensure close() is called.
    """
    path = Path(db_path) if db_path else get_db_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    return conn


def init_db(
    db_path: str | Path | None = None,
    seed_path: str | Path | None = None,
) -> None:
    """
    Create all collection tables if missing.
    If seed_path points at an existing JSON export, load it (replacing rows with the same ids).
    """
    path = Path(db_path) if db_path else get_db_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(path)
    try:
        conn.executescript(all_schema_sql())
        conn.commit()
        if seed_path and Path(seed_path).is_file():
            from .seed import load_seed_file
            counts = load_seed_file(conn, Path(seed_path))
            log.info("seed_loaded", path=str(seed_path), **counts)
    finally:
        conn.close()

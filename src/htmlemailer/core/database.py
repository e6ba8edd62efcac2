"""SQLite connection manager and schema setup."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Optional

_SCHEMA_PATH = Path(__file__).parent.parent / "db" / "schema.sql"


def get_connection(db_path: str) -> sqlite3.Connection:
    """Return a SQLite connection with WAL mode enabled."""
    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    return conn


def init_database(db_path: str) -> None:
    """Run the schema SQL to create all tables. Safe to call repeatedly."""
    conn = get_connection(db_path)
    try:
        conn.executescript(_SCHEMA_PATH.read_text())
    finally:
        conn.close()


def get_schema_version(db_path: str) -> Optional[int]:
    """Return the current schema version, or None if DB doesn't exist."""
    path = Path(db_path)
    if not path.exists():
        return None
    conn = get_connection(db_path)
    try:
        row = conn.execute(
            "SELECT MAX(version) as v FROM schema_version"
        ).fetchone()
        return row["v"] if row else None
    except sqlite3.OperationalError:
        return None
    finally:
        conn.close()

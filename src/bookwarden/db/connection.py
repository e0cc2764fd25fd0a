# ABOUTME: SQLite connection management for the search index database.
# ABOUTME: Opens or creates the index file and applies the schema on first use.

import sqlite3
from pathlib import Path

from bookwarden.db.schema import INDEX_VERSION, SCHEMA_V1


def _schema_exists(conn: sqlite3.Connection) -> bool:
    """Check if the schema has already been applied."""
    cursor = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name='schema_version'"
    )
    return cursor.fetchone() is not None


def get_schema_version(conn: sqlite3.Connection) -> int:
    """Read the current schema version from the database."""
    cursor = conn.execute("SELECT version FROM schema_version ORDER BY version DESC LIMIT 1")
    row = cursor.fetchone()
    return row[0] if row else 0


def open_index(path: Path) -> sqlite3.Connection:
    """Open or create the search index database.

    Creates parent directories if needed, applies the schema to a new file
    and sets WAL journal mode and sqlite3.Row factory.

    Raises:
        sqlite3.DatabaseError: If the file exists but is not a usable index,
            including one written by an incompatible version.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(path))
    try:
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")

        if not _schema_exists(conn):
            conn.executescript(SCHEMA_V1)

        version = get_schema_version(conn)
        if version != INDEX_VERSION:
            raise sqlite3.DatabaseError(
                f"Index schema version {version}, expected {INDEX_VERSION}"
            )
        conn.execute("SELECT count(*) FROM books_index").fetchone()
    except sqlite3.DatabaseError:
        conn.close()
        raise
    return conn

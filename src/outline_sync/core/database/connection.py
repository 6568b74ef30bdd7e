"""Connection and transaction helpers."""

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from outline_sync.core.database.schema import migrate_schema


def open_database(db_path: Path) -> sqlite3.Connection:
    """Open (creating if needed) the store at db_path and bring its schema up to date."""
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path))
    conn.execute("PRAGMA journal_mode=WAL")
    migrate_schema(conn)
    return conn


@contextmanager
def transaction(conn: sqlite3.Connection) -> Iterator[sqlite3.Connection]:
    """Commit the enclosed statements as one unit, rolling back on any error."""
    try:
        yield conn
    except BaseException:
        conn.rollback()
        raise
    conn.commit()

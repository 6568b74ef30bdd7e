"""Resolve client database references to canonical database ids."""

import sqlite3

from outline_sync.errors import storage_errors
from outline_sync.ids import parse_id, require_id


@storage_errors
def get_database_id(
    conn: sqlite3.Connection,
    account_id: int,
    database_id: str | None = None,
    database_name: str | None = None,
) -> str | None:
    """Return the database id referenced by id or by name, or None.

    A well-formed id is returned as-is: existence and ownership are not checked
    here. A malformed id falls through to the name lookup.
    """
    if database_id:
        parsed = parse_id(database_id)
        if parsed is not None:
            return parsed

    if database_name:
        row = conn.execute(
            "SELECT id FROM databases WHERE name = ? AND account_id = ? AND is_delete = 0",
            (database_name, account_id),
        ).fetchone()
        return row[0] if row else None

    return None


@storage_errors
def get_database_id_by_note(conn: sqlite3.Connection, note_id: str) -> str | None:
    """Return the database a note lives in, or None if the note does not exist."""
    note_id = require_id(note_id, "Invalid note ID format")
    row = conn.execute("SELECT database_id FROM notes WHERE id = ?", (note_id,)).fetchone()
    return row[0] if row else None


def pick_database_name(database_name: str | None, database: str | None) -> str | None:
    """Requests may name the database as `database-name` or `database`; the former wins."""
    return database_name or database

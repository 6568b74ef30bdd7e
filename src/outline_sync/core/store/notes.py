"""Note lifecycle: a note is created together with its root nav."""

import math
import sqlite3

from loguru import logger

from outline_sync.config import DEFAULT_NOTE_PAGE_SIZE, MAX_NOTE_PAGE_SIZE
from outline_sync.core.database.connection import transaction
from outline_sync.core.database.resolver import get_database_id
from outline_sync.core.database.updates import present_fields, update_fields
from outline_sync.errors import (
    BadRequestError,
    NotFoundError,
    PermissionDeniedError,
    storage_errors,
)
from outline_sync.ids import ROOT_NAV_CONTENT, ROOT_NAV_ID, id_or_new, now_ms, require_id
from outline_sync.models.outline import Note, NotePage

NOTE_COLUMNS = (
    "id, title, database_id, root_nav_id, is_delete, is_public, is_shortcut, "
    "account_id, pv, created_at, updated_at"
)


def note_from_row(row: tuple) -> Note:
    return Note(
        id=row[0], title=row[1], database_id=row[2], root_nav_id=row[3],
        is_delete=bool(row[4]), is_public=bool(row[5]), is_shortcut=bool(row[6]),
        account_id=row[7], pv=row[8], created_at=row[9], updated_at=row[10],
    )


def insert_root_nav(
    conn: sqlite3.Connection,
    *,
    root_nav_id: str,
    note_id: str,
    database_id: str,
    account_id: int,
    now: int,
    ignore_existing: bool = False,
) -> int:
    """Insert a note's root nav; returns the number of rows written."""
    verb = "INSERT OR IGNORE" if ignore_existing else "INSERT"
    cursor = conn.execute(
        f"""{verb} INTO navs
            (id, parid, same_deep_order, content, account_id, note_id, database_id,
             created_at, updated_at)
            VALUES (?, ?, 0, ?, ?, ?, ?, ?, ?)""",
        (root_nav_id, ROOT_NAV_ID, ROOT_NAV_CONTENT, account_id, note_id, database_id, now, now),
    )
    return cursor.rowcount


@storage_errors
def create_note(
    conn: sqlite3.Connection,
    *,
    account_id: int,
    title: str,
    database_id: str | None = None,
    database_name: str | None = None,
    note_id: str | None = None,
    root_nav_id: str | None = None,
) -> Note:
    """Create a note and its root nav in one transaction.

    Client-assigned note and root nav ids are honored when well-formed.
    """
    resolved = get_database_id(conn, account_id, database_id, database_name)
    if resolved is None:
        raise BadRequestError("Database not found")

    note_id = id_or_new(note_id, "Invalid note ID")
    root_nav_id = id_or_new(root_nav_id, "Invalid root nav ID")

    if conn.execute("SELECT 1 FROM notes WHERE id = ?", (note_id,)).fetchone():
        raise BadRequestError(f"Note {note_id} already exists")
    if conn.execute("SELECT 1 FROM navs WHERE id = ?", (root_nav_id,)).fetchone():
        raise BadRequestError(f"Nav {root_nav_id} already exists")

    now = now_ms()
    with transaction(conn):
        conn.execute(
            """INSERT INTO notes
                (id, title, database_id, root_nav_id, account_id, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)""",
            (note_id, title, resolved, root_nav_id, account_id, now, now),
        )
        insert_root_nav(
            conn,
            root_nav_id=root_nav_id,
            note_id=note_id,
            database_id=resolved,
            account_id=account_id,
            now=now,
        )
    logger.debug("Created note {!r} ({}) in {}", title, note_id, resolved)
    return get_note(conn, note_id)


@storage_errors
def get_note(conn: sqlite3.Connection, note_id: str) -> Note:
    note_id = require_id(note_id, "Invalid note ID format")
    row = conn.execute(f"SELECT {NOTE_COLUMNS} FROM notes WHERE id = ?", (note_id,)).fetchone()
    if row is None:
        raise NotFoundError("Note not found")
    return note_from_row(row)


@storage_errors
def update_note(
    conn: sqlite3.Connection,
    *,
    account_id: int,
    note_id: str,
    title: str | None = None,
    is_delete: bool | None = None,
    is_public: bool | None = None,
    is_shortcut: bool | None = None,
) -> None:
    """Patch the supplied fields of a note owned by account_id.

    Deleting a note soft-deletes its navs in the same transaction.
    """
    note_id = require_id(note_id, "Invalid note ID")
    row = conn.execute("SELECT account_id FROM notes WHERE id = ?", (note_id,)).fetchone()
    if row is None:
        raise NotFoundError("Note not found")
    if row[0] != account_id:
        raise PermissionDeniedError("Cannot update other's note")

    fields = present_fields(
        {"title": title, "is_delete": is_delete, "is_public": is_public, "is_shortcut": is_shortcut}
    )
    now = now_ms()
    with transaction(conn):
        update_fields(conn, "notes", note_id, fields, updated_at=now)
        if is_delete:
            conn.execute(
                "UPDATE navs SET is_delete = 1, updated_at = ? WHERE note_id = ?",
                (now, note_id),
            )


@storage_errors
def get_note_list(
    conn: sqlite3.Connection,
    database_id: str,
    *,
    page: int = 1,
    size: int = DEFAULT_NOTE_PAGE_SIZE,
    max_size: int = MAX_NOTE_PAGE_SIZE,
) -> NotePage:
    """Live notes of a database, most recently updated first."""
    page = max(page, 1)
    size = max(1, min(size, max_size))
    offset = (page - 1) * size

    total = conn.execute(
        "SELECT COUNT(*) FROM notes WHERE database_id = ? AND is_delete = 0", (database_id,)
    ).fetchone()[0]
    rows = conn.execute(
        f"SELECT {NOTE_COLUMNS} FROM notes WHERE database_id = ? AND is_delete = 0 "
        "ORDER BY updated_at DESC, id LIMIT ? OFFSET ?",
        (database_id, size, offset),
    ).fetchall()
    return NotePage(
        notes=tuple(note_from_row(r) for r in rows),
        all_pages=math.ceil(total / size),
    )


@storage_errors
def get_all_note_list(conn: sqlite3.Connection, database_id: str) -> NotePage:
    rows = conn.execute(
        f"SELECT {NOTE_COLUMNS} FROM notes WHERE database_id = ? AND is_delete = 0 "
        "ORDER BY updated_at DESC, id",
        (database_id,),
    ).fetchall()
    return NotePage(notes=tuple(note_from_row(r) for r in rows))


@storage_errors
def get_shortcut_note_list(conn: sqlite3.Connection, database_id: str) -> NotePage:
    rows = conn.execute(
        f"SELECT {NOTE_COLUMNS} FROM notes "
        "WHERE database_id = ? AND is_delete = 0 AND is_shortcut = 1 "
        "ORDER BY updated_at DESC, id",
        (database_id,),
    ).fetchall()
    return NotePage(notes=tuple(note_from_row(r) for r in rows))

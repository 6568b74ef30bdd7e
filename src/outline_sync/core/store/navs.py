"""Outline store: create, patch and list the navs of a note."""

import sqlite3
from typing import Any

from loguru import logger

from outline_sync.core.database.connection import transaction
from outline_sync.core.database.resolver import get_database_id, get_database_id_by_note
from outline_sync.core.database.updates import present_fields, update_fields
from outline_sync.errors import BadRequestError, NotFoundError, storage_errors
from outline_sync.ids import ROOT_NAV_ID, new_id, now_ms, require_id
from outline_sync.models.outline import Nav

NAV_COLUMNS = (
    "id, parid, same_deep_order, content, account_id, note_id, database_id, "
    "is_display, is_public, is_delete, properties, extra_id, created_at, updated_at"
)


def nav_from_row(row: tuple) -> Nav:
    return Nav(
        id=row[0], parid=row[1], same_deep_order=row[2], content=row[3],
        account_id=row[4], note_id=row[5], database_id=row[6],
        is_display=bool(row[7]), is_public=bool(row[8]), is_delete=bool(row[9]),
        properties=row[10], extra_id=row[11], created_at=row[12], updated_at=row[13],
    )


@storage_errors
def get_nav(conn: sqlite3.Connection, nav_id: str) -> Nav | None:
    row = conn.execute(f"SELECT {NAV_COLUMNS} FROM navs WHERE id = ?", (nav_id,)).fetchone()
    return nav_from_row(row) if row else None


@storage_errors
def create_or_update_nav(
    conn: sqlite3.Connection,
    *,
    account_id: int,
    note_id: str,
    nav_id: str | None = None,
    database_id: str | None = None,
    database_name: str | None = None,
    parid: str | None = None,
    content: str | None = None,
    order: float | None = None,
    is_delete: bool | None = None,
    is_display: bool | None = None,
    properties: str | None = None,
) -> dict[str, Any]:
    """Patch an existing nav, or create one.

    When nav_id names an existing nav, only the supplied fields are written
    (the nav is located by id alone). Otherwise a nav is created, using nav_id
    if given, with defaults for everything not supplied.

    Returns the response dict, including a best-effort `backend-ts`.
    """
    resolved = get_database_id(conn, account_id, database_id, database_name)
    if resolved is None:
        resolved = get_database_id_by_note(conn, note_id)
    if resolved is None:
        raise BadRequestError("Database not found")
    note_id = require_id(note_id, "Invalid note ID format")

    if nav_id is not None:
        nav_id = require_id(nav_id, "Invalid nav ID")
        exists = conn.execute("SELECT 1 FROM navs WHERE id = ?", (nav_id,)).fetchone()
        if exists:
            fields = present_fields(
                {
                    "content": content,
                    "parid": parid,
                    "same_deep_order": order,
                    "is_delete": is_delete,
                    "is_display": is_display,
                    "properties": properties,
                }
            )
            if fields:
                with transaction(conn):
                    update_fields(
                        conn,
                        "navs",
                        nav_id,
                        [*fields, ("account_id", account_id)],
                        updated_at=now_ms(),
                    )
                logger.debug("Updated nav {} ({})", nav_id, ", ".join(c for c, _ in fields))
            return {"success": True, "id": nav_id, "backend-ts": now_ms()}

    now = now_ms()
    nav = Nav(
        id=nav_id or new_id(),
        parid=parid if parid is not None else ROOT_NAV_ID,
        same_deep_order=float(order) if order is not None else 0.0,
        content=content if content is not None else "",
        account_id=account_id,
        note_id=note_id,
        database_id=resolved,
        is_display=is_display if is_display is not None else True,
        is_public=False,
        is_delete=is_delete if is_delete is not None else False,
        properties=properties if properties is not None else "",
        extra_id="",
        created_at=now,
        updated_at=now,
    )
    with transaction(conn):
        conn.execute(
            """INSERT INTO navs
               (id, parid, same_deep_order, content, account_id, note_id, database_id,
                is_display, is_delete, properties, created_at, updated_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                nav.id, nav.parid, nav.same_deep_order, nav.content, nav.account_id,
                nav.note_id, nav.database_id, nav.is_display, nav.is_delete,
                nav.properties, nav.created_at, nav.updated_at,
            ),
        )
    logger.debug("Created nav {} in note {}", nav.id, note_id)

    return {
        "success": True,
        "id": nav.id,
        "nav": nav.to_wire(),
        "backend-ts": now_ms(),
    }


@storage_errors
def get_note_navs(conn: sqlite3.Connection, note_id: str) -> list[Nav]:
    """Live navs of a note in sibling order.

    Raises:
        BadRequestError: note_id is malformed.
        NotFoundError: the note does not exist.
    """
    note_id = require_id(note_id, "Invalid note ID format")
    note = conn.execute("SELECT 1 FROM notes WHERE id = ?", (note_id,)).fetchone()
    if note is None:
        raise NotFoundError("Note not found")

    rows = conn.execute(
        f"SELECT {NAV_COLUMNS} FROM navs WHERE note_id = ? AND is_delete = 0 "
        "ORDER BY same_deep_order, id",
        (note_id,),
    ).fetchall()
    return [nav_from_row(r) for r in rows]

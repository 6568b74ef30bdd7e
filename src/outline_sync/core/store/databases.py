"""Database (namespace) lifecycle: create, list, update, soft-delete with cascade."""

import sqlite3

from loguru import logger

from outline_sync.config import MAX_DATABASES_PER_ACCOUNT
from outline_sync.core.database.connection import transaction
from outline_sync.core.database.updates import present_fields, update_fields
from outline_sync.errors import (
    BadRequestError,
    NotFoundError,
    PermissionDeniedError,
    storage_errors,
)
from outline_sync.ids import new_id, now_ms, require_id
from outline_sync.models.outline import Database

DATABASE_COLUMNS = (
    "id, name, description, is_delete, is_public, is_offline, is_default, "
    "account_id, setting, created_at, updated_at"
)


def database_from_row(row: tuple) -> Database:
    return Database(
        id=row[0], name=row[1], description=row[2], is_delete=bool(row[3]),
        is_public=bool(row[4]), is_offline=bool(row[5]), is_default=bool(row[6]),
        account_id=row[7], setting=row[8], created_at=row[9], updated_at=row[10],
    )


@storage_errors
def create_database(
    conn: sqlite3.Connection,
    *,
    account_id: int,
    name: str,
    description: str | None = None,
    max_databases: int = MAX_DATABASES_PER_ACCOUNT,
) -> Database:
    """Create a database owned by account_id.

    Raises:
        BadRequestError: the account is at its quota, or already has a live
            database with this name.
    """
    if not name.strip():
        raise BadRequestError("Database name required")

    count = conn.execute(
        "SELECT COUNT(*) FROM databases WHERE account_id = ? AND is_delete = 0",
        (account_id,),
    ).fetchone()[0]
    if count >= max_databases:
        raise BadRequestError(f"Maximum {max_databases} databases allowed")

    existing = conn.execute(
        "SELECT id FROM databases WHERE name = ? AND account_id = ? AND is_delete = 0",
        (name, account_id),
    ).fetchone()
    if existing:
        raise BadRequestError(f"Database '{name}' already exists")

    database_id = new_id()
    now = now_ms()
    with transaction(conn):
        conn.execute(
            """INSERT INTO databases (id, name, description, account_id, created_at, updated_at)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (database_id, name, description, account_id, now, now),
        )
    logger.debug("Created database {} ({})", name, database_id)
    return get_database(conn, database_id)


@storage_errors
def get_database(conn: sqlite3.Connection, database_id: str) -> Database:
    row = conn.execute(
        f"SELECT {DATABASE_COLUMNS} FROM databases WHERE id = ?", (database_id,)
    ).fetchone()
    if row is None:
        raise NotFoundError("Database not found")
    return database_from_row(row)


@storage_errors
def get_database_list(conn: sqlite3.Connection, account_id: int) -> list[Database]:
    rows = conn.execute(
        f"SELECT {DATABASE_COLUMNS} FROM databases "
        "WHERE account_id = ? AND is_delete = 0 ORDER BY created_at DESC",
        (account_id,),
    ).fetchall()
    return [database_from_row(r) for r in rows]


def _check_owner(conn: sqlite3.Connection, database_id: str, account_id: int, action: str) -> None:
    row = conn.execute(
        "SELECT account_id FROM databases WHERE id = ? AND is_delete = 0", (database_id,)
    ).fetchone()
    if row is None:
        raise NotFoundError("Database not found")
    if row[0] != account_id:
        raise PermissionDeniedError(f"Cannot {action} other's database")


def _cascade_delete(conn: sqlite3.Connection, database_id: str, now: int) -> None:
    """Soft-delete a database's notes and navs. Caller owns the transaction."""
    conn.execute(
        "UPDATE notes SET is_delete = 1, updated_at = ? WHERE database_id = ?",
        (now, database_id),
    )
    conn.execute(
        "UPDATE navs SET is_delete = 1, updated_at = ? WHERE database_id = ?",
        (now, database_id),
    )


@storage_errors
def delete_database(
    conn: sqlite3.Connection,
    *,
    account_id: int,
    database_id: str | None = None,
    database_name: str | None = None,
) -> None:
    """Soft-delete a database together with all of its notes and navs.

    Every affected row gets a fresh updated_at so sync clients replicate the
    deletion.
    """
    if database_id is not None:
        target = require_id(database_id, "Invalid database ID")
    elif database_name is not None:
        row = conn.execute(
            "SELECT id FROM databases WHERE name = ? AND account_id = ? AND is_delete = 0",
            (database_name, account_id),
        ).fetchone()
        if row is None:
            raise NotFoundError("Database not found")
        target = row[0]
    else:
        raise BadRequestError("Database ID or name required")

    _check_owner(conn, target, account_id, "delete")

    now = now_ms()
    with transaction(conn):
        conn.execute(
            "UPDATE databases SET is_delete = 1, updated_at = ? WHERE id = ?", (now, target)
        )
        _cascade_delete(conn, target, now)
    logger.info("Deleted database {}", target)


@storage_errors
def update_database(
    conn: sqlite3.Connection,
    *,
    account_id: int,
    database_id: str | None,
    name: str | None = None,
    is_public: bool | None = None,
    is_default: bool | None = None,
    is_delete: bool | None = None,
) -> None:
    """Patch the supplied fields of a database; is_delete=True cascades."""
    if database_id is None:
        raise BadRequestError("Database ID required")
    target = require_id(database_id, "Invalid database ID")

    row = conn.execute("SELECT account_id FROM databases WHERE id = ?", (target,)).fetchone()
    if row is None:
        raise NotFoundError("Database not found")
    if row[0] != account_id:
        raise PermissionDeniedError("Cannot update other's database")

    if name is not None:
        taken = conn.execute(
            "SELECT 1 FROM databases "
            "WHERE name = ? AND account_id = ? AND is_delete = 0 AND id != ?",
            (name, account_id, target),
        ).fetchone()
        if taken:
            raise BadRequestError(f"Database '{name}' already exists")

    fields = present_fields(
        {"name": name, "is_public": is_public, "is_default": is_default, "is_delete": is_delete}
    )
    now = now_ms()
    with transaction(conn):
        update_fields(conn, "databases", target, fields, updated_at=now)
        if is_delete:
            _cascade_delete(conn, target, now)

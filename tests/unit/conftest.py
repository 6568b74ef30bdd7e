"""Shared test fixtures."""

import sqlite3
from collections.abc import Iterator

import pytest

from outline_sync.core.database.schema import create_schema
from outline_sync.core.store.databases import create_database
from outline_sync.core.store.navs import create_or_update_nav
from outline_sync.core.store.notes import create_note
from tests.unit.factories import ACCOUNT_ID, Seeded


@pytest.fixture
def conn() -> Iterator[sqlite3.Connection]:
    """Return an in-memory DB with the schema created."""
    connection = sqlite3.connect(":memory:")
    create_schema(connection)
    yield connection
    connection.close()


@pytest.fixture
def seeded(conn: sqlite3.Connection) -> Seeded:
    database = create_database(conn, account_id=ACCOUNT_ID, name="Main")
    note = create_note(conn, account_id=ACCOUNT_ID, title="Plans", database_id=database.id)

    def add(content: str, parid: str, order: float) -> str:
        result = create_or_update_nav(
            conn,
            account_id=ACCOUNT_ID,
            note_id=note.id,
            database_id=database.id,
            parid=parid,
            content=content,
            order=order,
        )
        return result["id"]

    a = add("Alpha", note.root_nav_id, 1.0)
    a1 = add("Alpha child", a, 1.0)
    b = add("Beta", note.root_nav_id, 2.0)
    return Seeded(
        conn=conn,
        database_id=database.id,
        note=note,
        nav_ids={"root": note.root_nav_id, "a": a, "a1": a1, "b": b},
    )

"""Tests for database reference resolution."""

import sqlite3

import pytest

from outline_sync.core.database.resolver import (
    get_database_id,
    get_database_id_by_note,
    pick_database_name,
)
from outline_sync.core.store.databases import delete_database
from outline_sync.errors import BadRequestError
from outline_sync.ids import new_id
from tests.unit.factories import ACCOUNT_ID, OTHER_ACCOUNT_ID, Seeded


def test_well_formed_id_is_returned_without_existence_check(conn: sqlite3.Connection) -> None:
    unknown = new_id()
    assert get_database_id(conn, ACCOUNT_ID, unknown) == unknown


def test_name_lookup_is_scoped_to_account(seeded: Seeded) -> None:
    assert get_database_id(seeded.conn, ACCOUNT_ID, database_name="Main") == seeded.database_id
    assert get_database_id(seeded.conn, OTHER_ACCOUNT_ID, database_name="Main") is None


def test_malformed_id_falls_back_to_name(seeded: Seeded) -> None:
    resolved = get_database_id(seeded.conn, ACCOUNT_ID, "garbage", "Main")
    assert resolved == seeded.database_id


def test_nothing_usable_resolves_to_none(conn: sqlite3.Connection) -> None:
    assert get_database_id(conn, ACCOUNT_ID) is None
    assert get_database_id(conn, ACCOUNT_ID, "garbage") is None


def test_deleted_database_name_does_not_resolve(seeded: Seeded) -> None:
    delete_database(seeded.conn, account_id=ACCOUNT_ID, database_id=seeded.database_id)
    assert get_database_id(seeded.conn, ACCOUNT_ID, database_name="Main") is None


def test_database_by_note(seeded: Seeded) -> None:
    assert get_database_id_by_note(seeded.conn, seeded.note.id) == seeded.database_id
    assert get_database_id_by_note(seeded.conn, new_id()) is None
    with pytest.raises(BadRequestError):
        get_database_id_by_note(seeded.conn, "bad-id")


def test_pick_database_name_prefers_database_name() -> None:
    assert pick_database_name("A", "B") == "A"
    assert pick_database_name(None, "B") == "B"
    assert pick_database_name(None, None) is None

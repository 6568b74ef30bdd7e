"""Tests for database lifecycle and delete cascade."""

import sqlite3

import pytest

from outline_sync.core.store.databases import (
    create_database,
    delete_database,
    get_database,
    get_database_list,
    update_database,
)
from outline_sync.core.store.navs import get_note_navs
from outline_sync.core.store.notes import get_all_note_list
from outline_sync.core.sync.cursor import get_all_navs, get_all_navs_by_page
from outline_sync.errors import BadRequestError, NotFoundError, PermissionDeniedError
from outline_sync.ids import new_id
from tests.unit.factories import ACCOUNT_ID, OTHER_ACCOUNT_ID, Seeded


def test_create_database_enforces_quota(conn: sqlite3.Connection) -> None:
    for i in range(3):
        create_database(conn, account_id=ACCOUNT_ID, name=f"db{i}", max_databases=3)
    with pytest.raises(BadRequestError, match="Maximum 3 databases"):
        create_database(conn, account_id=ACCOUNT_ID, name="one-more", max_databases=3)


def test_create_database_rejects_duplicate_live_name(conn: sqlite3.Connection) -> None:
    create_database(conn, account_id=ACCOUNT_ID, name="Main")
    with pytest.raises(BadRequestError, match="already exists"):
        create_database(conn, account_id=ACCOUNT_ID, name="Main")
    # Same name under another account is fine.
    create_database(conn, account_id=OTHER_ACCOUNT_ID, name="Main")


def test_name_is_reusable_after_delete(conn: sqlite3.Connection) -> None:
    first = create_database(conn, account_id=ACCOUNT_ID, name="Main")
    delete_database(conn, account_id=ACCOUNT_ID, database_id=first.id)
    second = create_database(conn, account_id=ACCOUNT_ID, name="Main")
    assert second.id != first.id
    assert [d.id for d in get_database_list(conn, ACCOUNT_ID)] == [second.id]


def test_delete_cascade_hides_from_listings_but_not_from_sync(seeded: Seeded) -> None:
    checkpoint = get_all_navs(seeded.conn, seeded.database_id).backend_ts

    delete_database(seeded.conn, account_id=ACCOUNT_ID, database_name="Main")

    assert get_database(seeded.conn, seeded.database_id).is_delete is True
    assert get_all_note_list(seeded.conn, seeded.database_id).notes == ()
    assert get_note_navs(seeded.conn, seeded.note.id) == []

    page = get_all_navs_by_page(seeded.conn, seeded.database_id)
    assert {n.id for n in page.navs} == set(seeded.nav_ids.values())
    assert all(n.is_delete for n in page.navs)

    # The cascade bumps updated_at, so incremental clients see it too.
    changed = get_all_navs(seeded.conn, seeded.database_id, backend_ts=checkpoint)
    assert len(changed.navs) == len(seeded.nav_ids)


def test_delete_database_errors(seeded: Seeded) -> None:
    with pytest.raises(BadRequestError, match="ID or name required"):
        delete_database(seeded.conn, account_id=ACCOUNT_ID)
    with pytest.raises(BadRequestError, match="Invalid database ID"):
        delete_database(seeded.conn, account_id=ACCOUNT_ID, database_id="bad")
    with pytest.raises(NotFoundError):
        delete_database(seeded.conn, account_id=ACCOUNT_ID, database_id=new_id())
    with pytest.raises(NotFoundError):
        delete_database(seeded.conn, account_id=ACCOUNT_ID, database_name="Other")
    with pytest.raises(PermissionDeniedError):
        delete_database(seeded.conn, account_id=OTHER_ACCOUNT_ID, database_id=seeded.database_id)


def test_update_database_partial_and_cascading(seeded: Seeded) -> None:
    update_database(
        seeded.conn, account_id=ACCOUNT_ID, database_id=seeded.database_id, is_public=True
    )
    database = get_database(seeded.conn, seeded.database_id)
    assert database.is_public is True
    assert database.name == "Main"

    with pytest.raises(PermissionDeniedError):
        update_database(
            seeded.conn, account_id=OTHER_ACCOUNT_ID, database_id=seeded.database_id, name="x"
        )

    update_database(
        seeded.conn, account_id=ACCOUNT_ID, database_id=seeded.database_id, is_delete=True
    )
    assert get_note_navs(seeded.conn, seeded.note.id) == []


def test_rename_to_live_name_is_bad_request(conn: sqlite3.Connection) -> None:
    main = create_database(conn, account_id=ACCOUNT_ID, name="Main")
    work = create_database(conn, account_id=ACCOUNT_ID, name="Work")

    with pytest.raises(BadRequestError, match="'Main' already exists"):
        update_database(conn, account_id=ACCOUNT_ID, database_id=work.id, name="Main")
    assert get_database(conn, work.id).name == "Work"

    # Keeping its own name is not a collision.
    update_database(conn, account_id=ACCOUNT_ID, database_id=main.id, name="Main")


def test_database_list_is_newest_first(conn: sqlite3.Connection) -> None:
    first = create_database(conn, account_id=ACCOUNT_ID, name="First")
    second = create_database(conn, account_id=ACCOUNT_ID, name="Second")
    assert [d.id for d in get_database_list(conn, ACCOUNT_ID)] == [second.id, first.id]

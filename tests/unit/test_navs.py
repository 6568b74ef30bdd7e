"""Tests for creating, patching and listing navs."""

import pytest

from outline_sync.core.store.navs import create_or_update_nav, get_nav, get_note_navs
from outline_sync.errors import BadRequestError, NotFoundError
from outline_sync.ids import ROOT_NAV_ID, new_id
from tests.unit.factories import ACCOUNT_ID, OTHER_ACCOUNT_ID, Seeded


def test_create_applies_defaults(seeded: Seeded) -> None:
    result = create_or_update_nav(seeded.conn, account_id=ACCOUNT_ID, note_id=seeded.note.id)

    assert result["success"] is True
    nav = result["nav"]
    assert nav["parid"] == ROOT_NAV_ID
    assert nav["content"] == ""
    assert nav["same-deep-order"] == 0.0
    assert nav["properties"] == ""
    assert nav["is-display"] is True
    assert nav["is-delete"] is False
    assert nav["database-id"] == seeded.database_id
    assert isinstance(result["backend-ts"], int)


def test_create_honors_client_assigned_id(seeded: Seeded) -> None:
    nav_id = new_id()
    result = create_or_update_nav(
        seeded.conn, account_id=ACCOUNT_ID, note_id=seeded.note.id, nav_id=nav_id, content="x"
    )
    assert result["id"] == nav_id
    assert "nav" in result


def test_create_response_matches_stored_nav(seeded: Seeded) -> None:
    result = create_or_update_nav(
        seeded.conn,
        account_id=ACCOUNT_ID,
        note_id=seeded.note.id,
        parid=seeded.nav_ids["b"],
        content="Beta child",
        order=2,
        is_display=False,
    )

    stored = get_nav(seeded.conn, result["id"])
    assert stored is not None
    assert result["nav"] == stored.to_wire()
    assert result["nav"]["same-deep-order"] == 2.0


def test_partial_update_keeps_unspecified_fields(seeded: Seeded) -> None:
    nav_id = seeded.nav_ids["a"]
    before = get_nav(seeded.conn, nav_id)
    assert before is not None

    result = create_or_update_nav(
        seeded.conn,
        account_id=OTHER_ACCOUNT_ID,
        note_id=seeded.note.id,
        nav_id=nav_id,
        content="Alpha (edited)",
    )

    assert result == {"success": True, "id": nav_id, "backend-ts": result["backend-ts"]}
    after = get_nav(seeded.conn, nav_id)
    assert after is not None
    assert after.content == "Alpha (edited)"
    assert after.parid == before.parid
    assert after.same_deep_order == before.same_deep_order
    assert after.properties == before.properties
    assert after.updated_at > before.updated_at
    assert after.created_at == before.created_at
    assert after.account_id == OTHER_ACCOUNT_ID


def test_update_with_no_fields_writes_nothing(seeded: Seeded) -> None:
    nav_id = seeded.nav_ids["b"]
    before = get_nav(seeded.conn, nav_id)

    create_or_update_nav(seeded.conn, account_id=ACCOUNT_ID, note_id=seeded.note.id, nav_id=nav_id)

    assert get_nav(seeded.conn, nav_id) == before


def test_update_locates_nav_by_id_alone(seeded: Seeded) -> None:
    """The note id in a patch is only used to find the database, not to scope the nav."""
    nav_id = seeded.nav_ids["b"]
    create_or_update_nav(
        seeded.conn,
        account_id=ACCOUNT_ID,
        note_id=seeded.note.id,
        database_id=new_id(),
        nav_id=nav_id,
        order=9.5,
    )
    nav = get_nav(seeded.conn, nav_id)
    assert nav is not None
    assert nav.same_deep_order == 9.5
    assert nav.database_id == seeded.database_id


def test_database_falls_back_to_note(seeded: Seeded) -> None:
    result = create_or_update_nav(
        seeded.conn, account_id=ACCOUNT_ID, note_id=seeded.note.id, database_name="Nope"
    )
    assert result["nav"]["database-id"] == seeded.database_id


def test_unresolvable_database_is_bad_request(seeded: Seeded) -> None:
    with pytest.raises(BadRequestError, match="Database not found"):
        create_or_update_nav(seeded.conn, account_id=ACCOUNT_ID, note_id=new_id())


def test_malformed_nav_id_is_bad_request(seeded: Seeded) -> None:
    with pytest.raises(BadRequestError, match="Invalid nav ID"):
        create_or_update_nav(
            seeded.conn, account_id=ACCOUNT_ID, note_id=seeded.note.id, nav_id="xyz"
        )


def test_get_note_navs_orders_by_sibling_order_and_hides_deleted(seeded: Seeded) -> None:
    create_or_update_nav(
        seeded.conn,
        account_id=ACCOUNT_ID,
        note_id=seeded.note.id,
        nav_id=seeded.nav_ids["a1"],
        is_delete=True,
    )

    navs = get_note_navs(seeded.conn, seeded.note.id)

    ids = [n.id for n in navs]
    assert seeded.nav_ids["a1"] not in ids
    assert all(not n.is_delete for n in navs)
    orders = [n.same_deep_order for n in navs]
    assert orders == sorted(orders)
    assert ids[0] == seeded.nav_ids["root"]


def test_get_note_navs_missing_note(seeded: Seeded) -> None:
    with pytest.raises(NotFoundError):
        get_note_navs(seeded.conn, new_id())
    with pytest.raises(BadRequestError):
        get_note_navs(seeded.conn, "not-an-id")

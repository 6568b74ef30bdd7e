"""Field-mask partial updates.

Callers pass the (column, value) pairs a request actually carried; the column
names must come from the table's allow-list, never from request keys.
"""

import sqlite3
from collections.abc import Iterable, Mapping
from typing import Any

UPDATABLE_COLUMNS: dict[str, frozenset[str]] = {
    "navs": frozenset(
        {
            "parid", "same_deep_order", "content", "is_delete",
            "is_display", "properties", "account_id",
        }
    ),
    "notes": frozenset({"title", "is_delete", "is_public", "is_shortcut"}),
    "databases": frozenset({"name", "is_public", "is_default", "is_delete"}),
}


def present_fields(mapping: Mapping[str, Any]) -> list[tuple[str, Any]]:
    """Keep only the fields that were supplied (not None)."""
    return [(column, value) for column, value in mapping.items() if value is not None]


def update_fields(
    conn: sqlite3.Connection,
    table: str,
    row_id: str,
    fields: Iterable[tuple[str, Any]],
    *,
    updated_at: int,
) -> bool:
    """Write the given fields plus updated_at as one parameterized UPDATE.

    Returns False (and writes nothing) when no fields were given.
    """
    allowed = UPDATABLE_COLUMNS[table]
    fields = list(fields)
    if not fields:
        return False

    for column, _ in fields:
        if column not in allowed:
            msg = f"Column {column!r} is not updatable on {table}"
            raise ValueError(msg)

    assignments = ", ".join(f"{column} = ?" for column, _ in fields)
    params = [value for _, value in fields]
    conn.execute(
        f"UPDATE {table} SET {assignments}, updated_at = ? WHERE id = ?",
        [*params, updated_at, row_id],
    )
    return True

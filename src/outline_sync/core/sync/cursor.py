"""Incremental sync: navs of a database changed since a checkpoint.

Results are ordered by (updated_at, id) and include soft-deleted navs, so a
client replays deletions instead of silently dropping state.

The checkpoint is `backend_ts` (exclusive). Passing `since_id` as well turns it
into a composite cursor: navs at exactly `backend_ts` with an id greater than
`since_id` are still returned, which makes resuming exact when several navs
share a millisecond.
"""

import math
import sqlite3
from typing import Any

from outline_sync.config import DEFAULT_NAV_PAGE_SIZE, MAX_NAV_PAGE_SIZE
from outline_sync.core.store.navs import NAV_COLUMNS, nav_from_row
from outline_sync.errors import storage_errors
from outline_sync.ids import now_ms
from outline_sync.models.outline import NavPage


def _changed_since(
    database_id: str, backend_ts: int, since_id: str | None
) -> tuple[str, list[Any]]:
    if since_id is None:
        return "database_id = ? AND updated_at > ?", [database_id, backend_ts]
    return (
        "database_id = ? AND (updated_at > ? OR (updated_at = ? AND id > ?))",
        [database_id, backend_ts, backend_ts, since_id],
    )


@storage_errors
def get_all_navs_by_page(
    conn: sqlite3.Connection,
    database_id: str,
    *,
    backend_ts: int = 0,
    page: int = 1,
    size: int = DEFAULT_NAV_PAGE_SIZE,
    since_id: str | None = None,
    max_size: int = MAX_NAV_PAGE_SIZE,
) -> NavPage:
    """One page of navs changed after the checkpoint.

    Args:
        conn: Database connection.
        database_id: Resolved database id.
        backend_ts: Exclusive checkpoint in ms (0 = all history).
        page: 1-based page number; values below 1 are treated as 1.
        size: Page size, clamped to [1, max_size].
        since_id: Optional id tie-breaker for a composite cursor.
        max_size: Upper bound for size.
    """
    page = max(page, 1)
    size = max(1, min(size, max_size))
    offset = (page - 1) * size
    where, params = _changed_since(database_id, backend_ts, since_id)

    total = conn.execute(f"SELECT COUNT(*) FROM navs WHERE {where}", params).fetchone()[0]
    rows = conn.execute(
        f"SELECT {NAV_COLUMNS} FROM navs WHERE {where} "
        "ORDER BY updated_at, id LIMIT ? OFFSET ?",
        [*params, size, offset],
    ).fetchall()

    return NavPage(
        navs=tuple(nav_from_row(r) for r in rows),
        all_pages=math.ceil(total / size),
        backend_ts=now_ms(),
    )


@storage_errors
def get_all_navs(
    conn: sqlite3.Connection,
    database_id: str,
    *,
    backend_ts: int = 0,
    since_id: str | None = None,
) -> NavPage:
    """Every nav changed after the checkpoint, unpaged."""
    where, params = _changed_since(database_id, backend_ts, since_id)
    rows = conn.execute(
        f"SELECT {NAV_COLUMNS} FROM navs WHERE {where} ORDER BY updated_at, id",
        params,
    ).fetchall()
    return NavPage(navs=tuple(nav_from_row(r) for r in rows), backend_ts=now_ms())

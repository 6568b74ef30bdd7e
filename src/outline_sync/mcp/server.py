"""MCP server exposing the outline store, sync feed and importer as tools."""

import base64
import binascii
import sqlite3
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

from loguru import logger
from mcp.server.fastmcp import Context, FastMCP

from outline_sync.config import (
    DEFAULT_NAV_PAGE_SIZE,
    DEFAULT_NOTE_PAGE_SIZE,
    MAX_NAV_PAGE_SIZE,
    MAX_NOTE_PAGE_SIZE,
    Settings,
    load_settings,
)
from outline_sync.core.database.connection import open_database
from outline_sync.core.database.resolver import get_database_id, pick_database_name
from outline_sync.core.importer.loader import import_notes
from outline_sync.core.store.navs import create_or_update_nav, get_note_navs
from outline_sync.core.store.notes import get_all_note_list, get_note_list
from outline_sync.core.sync.cursor import get_all_navs, get_all_navs_by_page
from outline_sync.errors import BadRequestError, OutlineSyncError, error_response

# --- Core functions (testable without MCP context) ---


def _require_database(
    conn: sqlite3.Connection,
    account_id: int,
    database_id: str | None,
    database_name: str | None,
) -> str:
    resolved = get_database_id(conn, account_id, database_id, database_name)
    if resolved is None:
        raise BadRequestError("Database not found")
    return resolved


def outline_create_or_update_nav(
    conn: sqlite3.Connection,
    *,
    account_id: int,
    note_id: str,
    nav_id: str | None = None,
    database_id: str | None = None,
    database_name: str | None = None,
    database: str | None = None,
    parid: str | None = None,
    content: str | None = None,
    order: float | None = None,
    is_delete: bool | None = None,
    is_display: bool | None = None,
    properties: str | None = None,
) -> dict[str, Any]:
    """Create a nav, or patch only the supplied fields of an existing one."""
    try:
        return create_or_update_nav(
            conn,
            account_id=account_id,
            note_id=note_id,
            nav_id=nav_id,
            database_id=database_id,
            database_name=pick_database_name(database_name, database),
            parid=parid,
            content=content,
            order=order,
            is_delete=is_delete,
            is_display=is_display,
            properties=properties,
        )
    except OutlineSyncError as e:
        return error_response(e)


def outline_get_note_navs(conn: sqlite3.Connection, *, note_id: str) -> dict[str, Any]:
    """Live navs of a note, ordered by same-deep-order."""
    try:
        navs = get_note_navs(conn, note_id)
    except OutlineSyncError as e:
        return error_response(e)
    return {"nav-list": [n.to_wire() for n in navs]}


def outline_get_all_navs_by_page(
    conn: sqlite3.Connection,
    *,
    account_id: int,
    database_id: str | None = None,
    database_name: str | None = None,
    database: str | None = None,
    backend_ts: int | None = None,
    since_id: str | None = None,
    page: int | None = None,
    size: int | None = None,
    max_size: int = MAX_NAV_PAGE_SIZE,
) -> dict[str, Any]:
    """One page of navs changed after backend_ts, oldest change first."""
    try:
        resolved = _require_database(
            conn, account_id, database_id, pick_database_name(database_name, database)
        )
        result = get_all_navs_by_page(
            conn,
            resolved,
            backend_ts=backend_ts or 0,
            page=page or 1,
            size=size or DEFAULT_NAV_PAGE_SIZE,
            since_id=since_id,
            max_size=max_size,
        )
    except OutlineSyncError as e:
        return error_response(e)
    return result.to_wire()


def outline_get_all_navs(
    conn: sqlite3.Connection,
    *,
    account_id: int,
    database_id: str | None = None,
    database_name: str | None = None,
    database: str | None = None,
    backend_ts: int | None = None,
    since_id: str | None = None,
) -> dict[str, Any]:
    """Every nav changed after backend_ts, unpaged."""
    try:
        resolved = _require_database(
            conn, account_id, database_id, pick_database_name(database_name, database)
        )
        result = get_all_navs(conn, resolved, backend_ts=backend_ts or 0, since_id=since_id)
    except OutlineSyncError as e:
        return error_response(e)
    return result.to_wire()


def outline_list_notes(
    conn: sqlite3.Connection,
    *,
    account_id: int,
    database_id: str | None = None,
    database_name: str | None = None,
    database: str | None = None,
    page: int | None = None,
    size: int | None = None,
    max_size: int = MAX_NOTE_PAGE_SIZE,
) -> dict[str, Any]:
    """Live notes of a database; paged when page is given."""
    try:
        resolved = _require_database(
            conn, account_id, database_id, pick_database_name(database_name, database)
        )
        if page is None:
            result = get_all_note_list(conn, resolved)
        else:
            result = get_note_list(
                conn,
                resolved,
                page=page,
                size=size or DEFAULT_NOTE_PAGE_SIZE,
                max_size=max_size,
            )
    except OutlineSyncError as e:
        return error_response(e)
    return result.to_wire()


def outline_import_files(
    conn: sqlite3.Connection,
    *,
    account_id: int,
    files: list[dict[str, str]],
    database_id: str | None = None,
    database_name: str | None = None,
) -> dict[str, Any]:
    """Import uploads given as [{"filename": ..., "content-base64": ...}]."""
    uploads: list[tuple[str, bytes]] = []
    for upload in files:
        filename = upload.get("filename") or "unknown.json"
        try:
            data = base64.b64decode(upload.get("content-base64", ""), validate=True)
        except (binascii.Error, ValueError):
            return {"error": f"Failed to read file: {filename} is not valid base64"}
        uploads.append((filename, data))

    try:
        result = import_notes(
            conn,
            account_id=account_id,
            files=uploads,
            database_id=database_id,
            database_name=database_name,
        )
    except OutlineSyncError as e:
        return error_response(e)
    return result.to_wire()


# --- MCP Server Setup ---


@dataclass
class ServerContext:
    """Shared resources for the MCP server lifetime."""

    conn: sqlite3.Connection
    settings: Settings


@asynccontextmanager
async def server_lifespan(_server: FastMCP) -> AsyncIterator[ServerContext]:
    """Open the store on startup, close on shutdown."""
    settings = load_settings()
    conn = open_database(settings.db_path)
    logger.info("Serving outline store at {}", settings.db_path)
    try:
        yield ServerContext(conn=conn, settings=settings)
    finally:
        conn.close()


mcp_server = FastMCP(
    "outline-sync",
    instructions="""\
Notes are outlines: each note is a tree of navs linked by `parid`, with siblings
ordered by `same-deep-order`.

- Use outline_get_note_navs_tool to read one note's live navs.
- Use outline_sync_navs_tool to pull changes since a checkpoint: pass the
  previous response's `backend-ts` (or `next-cursor`) back in. Deleted navs
  are included with `is-delete: true`.
- outline_set_nav_tool creates a nav or patches only the fields you pass.
""",
    lifespan=server_lifespan,
)


def _ctx(mcp_ctx: Context) -> ServerContext:
    return mcp_ctx.request_context.lifespan_context  # type: ignore[return-value]


# --- MCP Tool Wrappers ---


@mcp_server.tool()
async def outline_set_nav_tool(
    ctx: Context,
    note_id: str,
    nav_id: str | None = None,
    database: str | None = None,
    parid: str | None = None,
    content: str | None = None,
    order: float | None = None,
    is_delete: bool | None = None,
    is_display: bool | None = None,
    properties: str | None = None,
) -> dict[str, Any]:
    """Create a nav, or patch the supplied fields of an existing nav.

    Args:
        note_id: Note the nav belongs to.
        nav_id: Existing nav to patch, or client-assigned id for a new nav.
        database: Database id or name (defaults to the note's database).
        parid: Parent nav id.
        content: Content text.
        order: Sibling order (same-deep-order).
        is_delete: Soft-delete flag.
        is_display: Display flag.
        properties: Properties payload.
    """
    server = _ctx(ctx)
    return outline_create_or_update_nav(
        server.conn,
        account_id=server.settings.account_id,
        note_id=note_id,
        nav_id=nav_id,
        database_id=database,
        database_name=database,
        parid=parid,
        content=content,
        order=order,
        is_delete=is_delete,
        is_display=is_display,
        properties=properties,
    )


@mcp_server.tool()
async def outline_get_note_navs_tool(ctx: Context, note_id: str) -> dict[str, Any]:
    """List the live navs of a note in sibling order."""
    return outline_get_note_navs(_ctx(ctx).conn, note_id=note_id)


@mcp_server.tool()
async def outline_sync_navs_tool(
    ctx: Context,
    database: str,
    backend_ts: int = 0,
    since_id: str | None = None,
    page: int | None = None,
    size: int | None = None,
) -> dict[str, Any]:
    """Navs changed after a checkpoint, oldest change first.

    Omit page for the whole feed; with page, all-pages reports the page count.

    Args:
        database: Database id or name.
        backend_ts: Checkpoint from a previous response (0 = everything).
        since_id: since-id from a previous next-cursor, for exact resumption.
        page: 1-based page number.
        size: Page size (max 5000).
    """
    server = _ctx(ctx)
    if page is None:
        return outline_get_all_navs(
            server.conn,
            account_id=server.settings.account_id,
            database_id=database,
            database_name=database,
            backend_ts=backend_ts,
            since_id=since_id,
        )
    return outline_get_all_navs_by_page(
        server.conn,
        account_id=server.settings.account_id,
        database_id=database,
        database_name=database,
        backend_ts=backend_ts,
        since_id=since_id,
        page=page,
        size=size,
        max_size=server.settings.nav_page_size_max,
    )


@mcp_server.tool()
async def outline_list_notes_tool(
    ctx: Context,
    database: str,
    page: int | None = None,
    size: int | None = None,
) -> dict[str, Any]:
    """List live notes in a database, most recently updated first."""
    server = _ctx(ctx)
    return outline_list_notes(
        server.conn,
        account_id=server.settings.account_id,
        database_id=database,
        database_name=database,
        page=page,
        size=size,
        max_size=server.settings.note_page_size_max,
    )


@mcp_server.tool()
async def outline_import_tool(
    ctx: Context,
    database: str,
    files: list[dict[str, str]],
) -> dict[str, Any]:
    """Import exported notes (JSON documents or zip archives).

    Each file is {"filename": "...", "content-base64": "..."}. Every document
    is imported atomically; failures are reported per file.
    """
    server = _ctx(ctx)
    return outline_import_files(
        server.conn,
        account_id=server.settings.account_id,
        files=files,
        database_id=database,
        database_name=database,
    )


def run_mcp_server() -> None:
    """Run the MCP server with stdio transport."""
    from outline_sync.logging_config import configure_logging

    configure_logging(verbose=False)
    mcp_server.run(transport="stdio")

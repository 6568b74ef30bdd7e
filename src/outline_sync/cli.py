"""CLI for outline-sync (databases, notes, navs, sync feed, import)."""

import json
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, Any

import typer
from loguru import logger

from outline_sync.config import Settings, load_settings
from outline_sync.core.database.connection import open_database
from outline_sync.core.database.resolver import get_database_id
from outline_sync.core.importer.loader import import_notes
from outline_sync.core.store.databases import create_database, delete_database, get_database_list
from outline_sync.core.store.navs import create_or_update_nav, get_note_navs
from outline_sync.core.store.notes import (
    create_note,
    get_all_note_list,
    get_note_list,
    get_shortcut_note_list,
)
from outline_sync.core.sync.cursor import get_all_navs, get_all_navs_by_page
from outline_sync.core.tree.markdown import render_note_as_markdown
from outline_sync.errors import BadRequestError, OutlineSyncError
from outline_sync.logging_config import configure_logging

app = typer.Typer(help="outline-sync: outline storage, incremental sync and bulk import.")

DatabaseOption = Annotated[
    str,
    typer.Option("--database", "-D", help="Database id or name"),
]


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    data_dir: Annotated[
        Path | None,
        typer.Option("--data-dir", "-d", help="Directory holding outline.db"),
    ] = None,
    account: Annotated[
        int | None,
        typer.Option("--account", "-a", help="Account id attributed to writes"),
    ] = None,
) -> None:
    configure_logging(verbose=verbose)
    ctx.obj = load_settings(data_dir=data_dir, account_id=account)


@contextmanager
def _session(ctx: typer.Context) -> Iterator[tuple[sqlite3.Connection, Settings]]:
    """Open the store for one command and turn domain errors into exit code 1."""
    settings: Settings = ctx.obj
    conn = open_database(settings.db_path)
    try:
        yield conn, settings
    except OutlineSyncError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(1) from None
    finally:
        conn.close()


def _resolve(conn: sqlite3.Connection, settings: Settings, database: str) -> str:
    database_id = get_database_id(conn, settings.account_id, database, database)
    if database_id is None:
        raise BadRequestError("Database not found")
    return database_id


def _echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False))


@app.command()
def init(ctx: typer.Context) -> None:
    """Create the store (if needed) and print its location."""
    with _session(ctx) as (_conn, settings):
        typer.echo(f"Store ready at {settings.db_path}")


@app.command(name="create-database")
def create_database_cmd(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Database name"),
    description: str | None = typer.Option(None, "--description", help="Description"),
) -> None:
    """Create a database owned by the current account."""
    with _session(ctx) as (conn, settings):
        database = create_database(
            conn,
            account_id=settings.account_id,
            name=name,
            description=description,
            max_databases=settings.max_databases_per_account,
        )
        typer.echo(f"Created database {database.name}  [id={database.id}]")


@app.command()
def databases(ctx: typer.Context) -> None:
    """List the current account's databases."""
    with _session(ctx) as (conn, settings):
        rows = get_database_list(conn, settings.account_id)
        typer.echo(f"{len(rows)} databases:\n")
        for database in rows:
            typer.echo(f"  {database.name}  [id={database.id}]")


@app.command(name="delete-database")
def delete_database_cmd(
    ctx: typer.Context,
    database: DatabaseOption,
) -> None:
    """Soft-delete a database with all of its notes and navs."""
    with _session(ctx) as (conn, settings):
        database_id = _resolve(conn, settings, database)
        delete_database(conn, account_id=settings.account_id, database_id=database_id)
        typer.echo(f"Deleted database {database_id}")


@app.command(name="create-note")
def create_note_cmd(
    ctx: typer.Context,
    title: Annotated[str, typer.Argument(help="Note title")],
    database: DatabaseOption,
    note_id: str | None = typer.Option(None, "--note-id", help="Client-assigned note id"),
) -> None:
    """Create a note (and its root nav)."""
    with _session(ctx) as (conn, settings):
        note = create_note(
            conn,
            account_id=settings.account_id,
            title=title,
            database_id=database,
            database_name=database,
            note_id=note_id,
        )
        typer.echo(f"Created note {note.title}  [id={note.id} root={note.root_nav_id}]")


@app.command()
def notes(
    ctx: typer.Context,
    database: DatabaseOption,
    page: int | None = typer.Option(None, "--page", help="1-based page (omit for all)"),
    size: int = typer.Option(100, "--size", help="Page size"),
    shortcuts: bool = typer.Option(False, "--shortcuts", help="Only shortcut notes"),
) -> None:
    """List live notes in a database."""
    with _session(ctx) as (conn, settings):
        database_id = _resolve(conn, settings, database)
        if shortcuts:
            result = get_shortcut_note_list(conn, database_id)
        elif page is not None:
            result = get_note_list(
                conn, database_id, page=page, size=size, max_size=settings.note_page_size_max
            )
        else:
            result = get_all_note_list(conn, database_id)
        _echo_json(result.to_wire())


@app.command(name="set-nav")
def set_nav(
    ctx: typer.Context,
    note_id: str = typer.Argument(..., help="Note the nav belongs to"),
    nav_id: str | None = typer.Option(None, "--id", help="Nav id (existing navs are patched)"),
    parid: str | None = typer.Option(None, "--parid", help="Parent nav id"),
    content: str | None = typer.Option(None, "--content", "-c", help="Content"),
    order: float | None = typer.Option(None, "--order", help="Sibling order"),
    properties: str | None = typer.Option(None, "--properties", help="Properties payload"),
    is_delete: bool | None = typer.Option(None, "--delete/--undelete", help="Soft-delete flag"),
    is_display: bool | None = typer.Option(None, "--display/--hide", help="Display flag"),
) -> None:
    """Create a nav, or patch the given fields of an existing one."""
    with _session(ctx) as (conn, settings):
        result = create_or_update_nav(
            conn,
            account_id=settings.account_id,
            note_id=note_id,
            nav_id=nav_id,
            parid=parid,
            content=content,
            order=order,
            properties=properties,
            is_delete=is_delete,
            is_display=is_display,
        )
        _echo_json(result)


@app.command()
def navs(
    ctx: typer.Context,
    note_id: str = typer.Argument(..., help="Note id"),
) -> None:
    """List the live navs of a note in sibling order."""
    with _session(ctx) as (conn, _settings):
        _echo_json({"nav-list": [n.to_wire() for n in get_note_navs(conn, note_id)]})


@app.command()
def read(
    ctx: typer.Context,
    note_id: str = typer.Argument(..., help="Note id"),
    max_depth: Annotated[
        int | None,
        typer.Option("--max-depth", "-m", help="Max depth levels to render"),
    ] = None,
) -> None:
    """Render a note's outline as markdown."""
    with _session(ctx) as (conn, _settings):
        typer.echo(render_note_as_markdown(conn, note_id, max_depth=max_depth), nl=False)


@app.command()
def sync(
    ctx: typer.Context,
    database: DatabaseOption,
    since: int = typer.Option(0, "--since", help="Checkpoint (backend-ts) in ms"),
    since_id: str | None = typer.Option(None, "--since-id", help="Composite cursor id"),
    page: int = typer.Option(1, "--page", help="1-based page"),
    size: int = typer.Option(1000, "--size", help="Page size"),
    fetch_all: bool = typer.Option(False, "--all", help="Return every change, unpaged"),
) -> None:
    """Print navs changed since a checkpoint, oldest change first."""
    with _session(ctx) as (conn, settings):
        database_id = _resolve(conn, settings, database)
        if fetch_all:
            result = get_all_navs(conn, database_id, backend_ts=since, since_id=since_id)
        else:
            result = get_all_navs_by_page(
                conn,
                database_id,
                backend_ts=since,
                page=page,
                size=size,
                since_id=since_id,
                max_size=settings.nav_page_size_max,
            )
        _echo_json(result.to_wire())


@app.command(name="import")
def import_cmd(
    ctx: typer.Context,
    files: Annotated[list[Path], typer.Argument(help="JSON documents or zip archives")],
    database: DatabaseOption,
) -> None:
    """Import exported notes into a database."""
    uploads: list[tuple[str, bytes]] = []
    for path in files:
        if not path.is_file():
            logger.error("File not found: {}", path)
            raise typer.Exit(1)
        uploads.append((path.name, path.read_bytes()))

    with _session(ctx) as (conn, settings):
        result = import_notes(
            conn,
            account_id=settings.account_id,
            files=uploads,
            database_id=database,
            database_name=database,
        )
        _echo_json(result.to_wire())
        if result.imported_count == 0:
            raise typer.Exit(1)

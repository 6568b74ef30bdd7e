"""Import exported notes into a target database, one transaction per document."""

import sqlite3
from collections.abc import Iterable

from loguru import logger

from outline_sync.core.database.resolver import get_database_id
from outline_sync.core.importer.archive_reader import collect_json_files
from outline_sync.core.importer.json_reader import parse_import_document
from outline_sync.core.store.notes import insert_root_nav
from outline_sync.errors import BadRequestError, OutlineSyncError, storage_errors
from outline_sync.ids import now_ms, require_id
from outline_sync.models.outline import ImportBatchResult, ImportedNote, ImportFailure


@storage_errors
def import_single_note(
    conn: sqlite3.Connection,
    *,
    account_id: int,
    database_id: str,
    filename: str,
    data: bytes,
) -> ImportedNote:
    """Import one document as a new note.

    The document is rejected before anything is written if its note id already
    exists anywhere, or a live note in the target database has the same title.
    Otherwise the note, its root nav and all navs are written atomically; navs
    whose id already exists are skipped.

    Returns:
        ImportedNote whose nav_count is the number of nav rows written,
        root included.
    """
    document = parse_import_document(data, filename=filename)
    note = document.note

    note_id = require_id(note.id, f"Invalid note ID in {filename}")
    root_nav_id = require_id(note.root_nav_id, f"Invalid root nav ID in {filename}")

    exists = conn.execute("SELECT 1 FROM notes WHERE id = ?", (note_id,)).fetchone()
    if exists:
        msg = f"Note {note.title} already exists (id={note_id}), skipped"
        raise BadRequestError(msg)

    title_exists = conn.execute(
        "SELECT 1 FROM notes WHERE database_id = ? AND title = ? AND is_delete = 0",
        (database_id, note.title),
    ).fetchone()
    if title_exists:
        msg = f"Note with title '{note.title}' already exists in this database, skipped"
        raise BadRequestError(msg)

    now = now_ms()
    try:
        conn.execute(
            """INSERT INTO notes
               (id, title, database_id, root_nav_id, is_delete, is_public, is_shortcut,
                account_id, created_at, updated_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                note_id, note.title, database_id, root_nav_id, note.is_delete,
                note.is_public, note.is_shortcut, account_id, now, now,
            ),
        )

        nav_count = insert_root_nav(
            conn,
            root_nav_id=root_nav_id,
            note_id=note_id,
            database_id=database_id,
            account_id=account_id,
            now=now,
            ignore_existing=True,
        )

        for nav in document.navs:
            nav_id = require_id(nav.id, f"Invalid nav ID: {nav.id}")
            cursor = conn.execute(
                """INSERT OR IGNORE INTO navs
                   (id, parid, same_deep_order, content, account_id, note_id, database_id,
                    is_display, is_delete, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    nav_id, nav.parid, nav.same_deep_order, nav.content, account_id,
                    note_id, database_id, nav.is_display, nav.is_delete, now, now,
                ),
            )
            nav_count += cursor.rowcount

        conn.commit()
    except Exception:
        conn.rollback()
        raise

    return ImportedNote(file=filename, note_id=note_id, title=note.title, nav_count=nav_count)


def import_notes(
    conn: sqlite3.Connection,
    *,
    account_id: int,
    files: Iterable[tuple[str, bytes]],
    database_id: str | None = None,
    database_name: str | None = None,
) -> ImportBatchResult:
    """Import a batch of uploads (JSON documents or zips of them).

    Documents are processed sequentially and independently: a document that
    fails is reported in the result and does not stop the batch.

    Raises:
        BadRequestError: no documents were uploaded, or the target database
            cannot be resolved.
    """
    documents: list[tuple[str, bytes]] = []
    for filename, data in files:
        documents.extend(collect_json_files(filename, data))

    if not documents:
        raise BadRequestError("No JSON files uploaded (or ZIP contains no .json files)")

    target = get_database_id(conn, account_id, database_id, database_name)
    if target is None:
        raise BadRequestError("Database not found")

    imported: list[ImportedNote] = []
    errors: list[ImportFailure] = []
    for filename, data in documents:
        try:
            info = import_single_note(
                conn,
                account_id=account_id,
                database_id=target,
                filename=filename,
                data=data,
            )
        except OutlineSyncError as e:
            logger.warning("Skipped {}: {}", filename, e.message)
            errors.append(ImportFailure(file=filename, error=e.message))
            continue

        imported.append(info)
        logger.info("Imported {} ({} navs)", info.title, info.nav_count)

    logger.info("Import complete: {} imported, {} failed", len(imported), len(errors))
    return ImportBatchResult(imported=tuple(imported), errors=tuple(errors))

"""SQLite schema creation and migration for the outline store."""

import sqlite3

SCHEMA_VERSION = 1

_SCHEMA_SQL = """\
CREATE TABLE IF NOT EXISTS databases (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    description TEXT,
    is_delete INTEGER NOT NULL DEFAULT 0,
    is_public INTEGER NOT NULL DEFAULT 0,
    is_offline INTEGER NOT NULL DEFAULT 0,
    is_default INTEGER NOT NULL DEFAULT 0,
    account_id INTEGER NOT NULL,
    setting TEXT NOT NULL DEFAULT '',
    created_at INTEGER NOT NULL,
    updated_at INTEGER NOT NULL
);

CREATE UNIQUE INDEX IF NOT EXISTS idx_databases_live_name
    ON databases(name, account_id) WHERE is_delete = 0;

CREATE TABLE IF NOT EXISTS notes (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    database_id TEXT NOT NULL,
    root_nav_id TEXT NOT NULL,
    is_delete INTEGER NOT NULL DEFAULT 0,
    is_public INTEGER NOT NULL DEFAULT 0,
    is_shortcut INTEGER NOT NULL DEFAULT 0,
    account_id INTEGER NOT NULL,
    pv INTEGER NOT NULL DEFAULT 0,
    created_at INTEGER NOT NULL,
    updated_at INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_notes_database ON notes(database_id, is_delete, updated_at);
CREATE INDEX IF NOT EXISTS idx_notes_title ON notes(database_id, title);

CREATE TABLE IF NOT EXISTS navs (
    id TEXT PRIMARY KEY,
    parid TEXT NOT NULL,
    same_deep_order REAL NOT NULL DEFAULT 0,
    content TEXT NOT NULL DEFAULT '',
    account_id INTEGER NOT NULL,
    note_id TEXT NOT NULL,
    database_id TEXT NOT NULL,
    is_display INTEGER NOT NULL DEFAULT 1,
    is_public INTEGER NOT NULL DEFAULT 0,
    is_delete INTEGER NOT NULL DEFAULT 0,
    properties TEXT NOT NULL DEFAULT '',
    extra_id TEXT NOT NULL DEFAULT '',
    created_at INTEGER NOT NULL,
    updated_at INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_navs_note ON navs(note_id, same_deep_order);
CREATE INDEX IF NOT EXISTS idx_navs_sync ON navs(database_id, updated_at, id);

CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


def create_schema(conn: sqlite3.Connection) -> None:
    """Create all tables and indexes."""
    conn.executescript(_SCHEMA_SQL)
    conn.execute(
        "INSERT OR REPLACE INTO metadata (key, value) VALUES (?, ?)",
        ("schema_version", str(SCHEMA_VERSION)),
    )
    conn.commit()


def get_schema_version(conn: sqlite3.Connection) -> int | None:
    """Return the current schema version, or None if metadata table doesn't exist."""
    try:
        row = conn.execute(
            "SELECT value FROM metadata WHERE key = 'schema_version'"
        ).fetchone()
    except sqlite3.OperationalError:
        return None
    return int(row[0]) if row else None


def migrate_schema(conn: sqlite3.Connection) -> None:
    """Create or migrate the database schema to the latest version."""
    version = get_schema_version(conn)
    if version is None:
        create_schema(conn)


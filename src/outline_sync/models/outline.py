"""Domain models for databases, notes and outline nodes (navs).

`to_wire()` methods produce the hyphenated response shape clients depend on.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any


def _iso(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000, tz=UTC).isoformat()


@dataclass(frozen=True)
class Database:
    """A user-owned namespace containing notes."""

    id: str
    name: str
    description: str | None
    is_delete: bool
    is_public: bool
    is_offline: bool
    is_default: bool
    account_id: int
    setting: str
    created_at: int
    updated_at: int

    def to_wire(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "is-delete": self.is_delete,
            "is-public": self.is_public,
            "is-default": self.is_default,
            "account-id": self.account_id,
            "created-at": _iso(self.created_at),
            "updated-at": _iso(self.updated_at),
        }


@dataclass(frozen=True)
class Note:
    """A named outline; `root_nav_id` pins the entry point of its tree."""

    id: str
    title: str
    database_id: str
    root_nav_id: str
    is_delete: bool
    is_public: bool
    is_shortcut: bool
    account_id: int
    pv: int
    created_at: int
    updated_at: int

    def to_wire(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "database-id": self.database_id,
            "root-nav-id": self.root_nav_id,
            "is-delete": self.is_delete,
            "is-public": self.is_public,
            "is-shortcut": self.is_shortcut,
            "account-id": self.account_id,
            "pv": self.pv,
            "created-at": _iso(self.created_at),
            "updated-at": _iso(self.updated_at),
        }


@dataclass(frozen=True)
class Nav:
    """A single outline node, stored as a parent-pointer record."""

    id: str
    parid: str
    same_deep_order: float
    content: str
    account_id: int
    note_id: str
    database_id: str
    is_display: bool
    is_public: bool
    is_delete: bool
    properties: str
    extra_id: str
    created_at: int
    updated_at: int

    def to_wire(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "parid": self.parid,
            "same-deep-order": self.same_deep_order,
            "content": self.content,
            "account-id": self.account_id,
            "last-account-id": self.account_id,
            "note-id": self.note_id,
            "database-id": self.database_id,
            "is-display": self.is_display,
            "is-public": self.is_public,
            "is-delete": self.is_delete,
            "properties": self.properties,
            "created-at": _iso(self.created_at),
            "updated-at": _iso(self.updated_at),
        }


@dataclass(frozen=True)
class NavPage:
    """One response of the sync feed."""

    navs: tuple[Nav, ...]
    backend_ts: int
    all_pages: int | None = None

    @property
    def next_cursor(self) -> tuple[int, str] | None:
        """(updated_at, id) of the last nav, for resuming with a composite cursor."""
        if not self.navs:
            return None
        last = self.navs[-1]
        return last.updated_at, last.id

    def to_wire(self) -> dict[str, Any]:
        data: dict[str, Any] = {"nav-list": [n.to_wire() for n in self.navs]}
        if self.all_pages is not None:
            data["all-pages"] = self.all_pages
        data["backend-ts"] = self.backend_ts
        cursor = self.next_cursor
        if cursor is not None:
            data["next-cursor"] = {"backend-ts": cursor[0], "since-id": cursor[1]}
        return data


@dataclass(frozen=True)
class NotePage:
    notes: tuple[Note, ...]
    all_pages: int | None = None

    def to_wire(self) -> dict[str, Any]:
        data: dict[str, Any] = {"note-list": [n.to_wire() for n in self.notes]}
        if self.all_pages is not None:
            data["all-pages"] = self.all_pages
        return data


# --- Import documents ---


@dataclass(frozen=True)
class ImportNoteData:
    id: str
    title: str
    root_nav_id: str
    is_delete: bool = False
    is_public: bool = False
    is_shortcut: bool = False


@dataclass(frozen=True)
class ImportNavData:
    id: str
    parid: str
    content: str
    same_deep_order: float
    is_display: bool = True
    is_delete: bool = False


@dataclass(frozen=True)
class ImportDocument:
    """One note plus its full nav set, as read from an uploaded file."""

    note: ImportNoteData
    navs: tuple[ImportNavData, ...]


@dataclass(frozen=True)
class ImportedNote:
    """Summary of a document committed by the importer."""

    file: str
    note_id: str
    title: str
    nav_count: int

    def to_wire(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "note-id": self.note_id,
            "title": self.title,
            "nav-count": self.nav_count,
        }


@dataclass(frozen=True)
class ImportFailure:
    file: str
    error: str

    def to_wire(self) -> dict[str, Any]:
        return {"file": self.file, "error": self.error}


@dataclass(frozen=True)
class ImportBatchResult:
    """Per-document outcome of an import batch; partial success is normal."""

    imported: tuple[ImportedNote, ...] = ()
    errors: tuple[ImportFailure, ...] = ()

    @property
    def imported_count(self) -> int:
        return len(self.imported)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    def to_wire(self) -> dict[str, Any]:
        return {
            "success": True,
            "imported-count": self.imported_count,
            "error-count": self.error_count,
            "imported": [i.to_wire() for i in self.imported],
            "errors": [e.to_wire() for e in self.errors],
        }

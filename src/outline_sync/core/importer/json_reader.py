"""Parse exported note documents into import models."""

import json
import math
from typing import Any

from outline_sync.errors import BadRequestError
from outline_sync.models.outline import ImportDocument, ImportNavData, ImportNoteData

# Exports namespace note keys; hand-written documents may use the bare form.
_NOTE_KEYS = {
    "id": ("hulunote-notes/id", "id"),
    "title": ("hulunote-notes/title", "title"),
    "root_nav_id": ("hulunote-navs/root-nav-id", "hulunote-notes/root-nav-id", "root-nav-id"),
    "is_delete": ("hulunote-notes/is-delete", "is-delete"),
    "is_public": ("hulunote-notes/is-public", "is-public"),
    "is_shortcut": ("hulunote-notes/is-shortcut", "is-shortcut"),
}


def _lookup(raw: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in raw:
            return raw[key]
    return None


def _require_str(value: Any, what: str, filename: str) -> str:
    if not isinstance(value, str):
        msg = f"Invalid JSON in {filename}: missing or non-string {what}"
        raise BadRequestError(msg)
    return value


def _optional_bool(value: Any, default: bool, what: str, filename: str) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        msg = f"Invalid JSON in {filename}: {what} must be a boolean"
        raise BadRequestError(msg)
    return value


def _parse_note(raw: Any, filename: str) -> ImportNoteData:
    if not isinstance(raw, dict):
        msg = f"Invalid JSON in {filename}: 'note' must be an object"
        raise BadRequestError(msg)
    return ImportNoteData(
        id=_require_str(_lookup(raw, _NOTE_KEYS["id"]), "note id", filename),
        title=_require_str(_lookup(raw, _NOTE_KEYS["title"]), "note title", filename),
        root_nav_id=_require_str(
            _lookup(raw, _NOTE_KEYS["root_nav_id"]), "root nav id", filename
        ),
        is_delete=_optional_bool(
            _lookup(raw, _NOTE_KEYS["is_delete"]), False, "is-delete", filename
        ),
        is_public=_optional_bool(
            _lookup(raw, _NOTE_KEYS["is_public"]), False, "is-public", filename
        ),
        is_shortcut=_optional_bool(
            _lookup(raw, _NOTE_KEYS["is_shortcut"]), False, "is-shortcut", filename
        ),
    )


def _parse_nav(raw: Any, filename: str) -> ImportNavData:
    if not isinstance(raw, dict):
        msg = f"Invalid JSON in {filename}: every nav must be an object"
        raise BadRequestError(msg)
    order = raw.get("same-deep-order")
    if isinstance(order, bool) or not isinstance(order, int | float):
        msg = f"Invalid JSON in {filename}: nav same-deep-order must be a number"
        raise BadRequestError(msg)
    try:
        order = float(order)
    except OverflowError:
        order = math.inf
    if not math.isfinite(order):
        msg = f"Invalid JSON in {filename}: nav same-deep-order must be a finite number"
        raise BadRequestError(msg)
    return ImportNavData(
        id=_require_str(raw.get("id"), "nav id", filename),
        parid=_require_str(raw.get("parid"), "nav parid", filename),
        content=_require_str(raw.get("content"), "nav content", filename),
        same_deep_order=order,
        is_display=_optional_bool(raw.get("is-display"), True, "is-display", filename),
        is_delete=_optional_bool(raw.get("is-delete"), False, "is-delete", filename),
    )


def parse_import_document(data: bytes | str, *, filename: str) -> ImportDocument:
    """Parse one uploaded document.

    Identifier formats are not checked here; the loader validates them.

    Raises:
        BadRequestError: the payload is not JSON or does not match the
            `{note: {...}, navs: [...]}` document shape.
    """
    try:
        raw = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise BadRequestError(f"Invalid JSON in {filename}: {e}") from e

    if not isinstance(raw, dict) or "note" not in raw:
        msg = f"Invalid JSON in {filename}: missing 'note'"
        raise BadRequestError(msg)
    navs = raw.get("navs")
    if not isinstance(navs, list):
        msg = f"Invalid JSON in {filename}: 'navs' must be a list"
        raise BadRequestError(msg)

    return ImportDocument(
        note=_parse_note(raw["note"], filename),
        navs=tuple(_parse_nav(n, filename) for n in navs),
    )

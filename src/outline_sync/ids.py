"""Identifiers and the server clock."""

import threading
import time
import uuid

from outline_sync.errors import BadRequestError

# Parent id of a note's root nav.
ROOT_NAV_ID = "00000000-0000-0000-0000-000000000000"

# Content of a root nav.
ROOT_NAV_CONTENT = "ROOT"


def parse_id(value: object) -> str | None:
    """Return the canonical form of a UUID string, or None if it does not parse."""
    if not isinstance(value, str):
        return None
    try:
        return str(uuid.UUID(value))
    except ValueError:
        return None


def require_id(value: object, message: str) -> str:
    """Like parse_id, but raise BadRequestError(message) on malformed input."""
    parsed = parse_id(value)
    if parsed is None:
        raise BadRequestError(message)
    return parsed


def new_id() -> str:
    return str(uuid.uuid4())


def id_or_new(value: object | None, message: str) -> str:
    """Use a caller-supplied id if present, else generate one."""
    if value is None:
        return new_id()
    return require_id(value, message)


_clock_lock = threading.Lock()
_last_ms = 0


def now_ms() -> int:
    """Milliseconds since epoch, strictly increasing within this process."""
    global _last_ms
    with _clock_lock:
        now = int(time.time() * 1000)
        if now <= _last_ms:
            now = _last_ms + 1
        _last_ms = now
        return now

"""Tests for identifiers and the server clock."""

import pytest

from outline_sync.errors import BadRequestError
from outline_sync.ids import id_or_new, new_id, now_ms, parse_id, require_id


def test_parse_id_canonicalizes_uppercase_uuid() -> None:
    raw = "9F1C2B3A-0000-4000-8000-00000000ABCD"
    assert parse_id(raw) == raw.lower()


@pytest.mark.parametrize("value", ["not-a-uuid", "", None, 42])
def test_parse_id_rejects_malformed_values(value: object) -> None:
    assert parse_id(value) is None


def test_require_id_raises_bad_request_with_message() -> None:
    with pytest.raises(BadRequestError, match="Invalid nav ID"):
        require_id("nope", "Invalid nav ID")


def test_id_or_new_generates_when_missing_and_honors_supplied() -> None:
    supplied = new_id()
    assert id_or_new(supplied, "bad") == supplied
    assert parse_id(id_or_new(None, "bad")) is not None


def test_now_ms_is_strictly_increasing() -> None:
    stamps = [now_ms() for _ in range(200)]
    assert all(b > a for a, b in zip(stamps, stamps[1:], strict=False))

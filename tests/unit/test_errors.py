"""Tests for the error taxonomy and helpers."""

import sqlite3

import pytest

from outline_sync.errors import (
    BadRequestError,
    NotFoundError,
    PermissionDeniedError,
    StorageError,
    error_response,
    storage_errors,
)


def test_status_codes() -> None:
    assert BadRequestError("x").status == 400
    assert PermissionDeniedError("x").status == 403
    assert NotFoundError("x").status == 404
    assert StorageError().status == 500


def test_storage_errors_hides_driver_details() -> None:
    @storage_errors
    def broken() -> None:
        raise sqlite3.OperationalError("no such table: secrets")

    with pytest.raises(StorageError) as excinfo:
        broken()
    assert excinfo.value.message == "Database error"
    assert isinstance(excinfo.value.__cause__, sqlite3.OperationalError)


def test_storage_errors_passes_domain_errors_through() -> None:
    @storage_errors
    def missing() -> None:
        raise NotFoundError("Note not found")

    with pytest.raises(NotFoundError):
        missing()


def test_error_response() -> None:
    assert error_response(BadRequestError("Invalid nav ID")) == {"error": "Invalid nav ID"}

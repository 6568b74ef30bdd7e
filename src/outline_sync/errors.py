"""Error taxonomy shared by the store, sync and import layers."""

import functools
import sqlite3
from collections.abc import Callable
from typing import Any, ParamSpec, TypeVar

from loguru import logger

P = ParamSpec("P")
R = TypeVar("R")


class OutlineSyncError(Exception):
    """Base error; `message` is safe to show to the caller."""

    status = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BadRequestError(OutlineSyncError):
    """Malformed identifiers, missing fields, duplicates, unreadable uploads."""

    status = 400


class NotFoundError(OutlineSyncError):
    status = 404


class PermissionDeniedError(OutlineSyncError):
    status = 403


class StorageError(OutlineSyncError):
    """The backing store failed; details are logged, never returned."""

    status = 500

    def __init__(self, message: str = "Database error") -> None:
        super().__init__(message)


def storage_errors(func: Callable[P, R]) -> Callable[P, R]:
    """Log sqlite3 failures and re-raise them as StorageError."""

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return func(*args, **kwargs)
        except sqlite3.Error as e:
            logger.exception("Storage failure in {}", func.__name__)
            raise StorageError() from e

    return wrapper


def error_response(exc: OutlineSyncError) -> dict[str, Any]:
    """Serialize an error the way responses carry it."""
    return {"error": exc.message}

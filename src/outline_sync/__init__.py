"""Outline-tree storage, incremental sync and bulk import."""

from outline_sync.config import Settings, load_settings
from outline_sync.errors import (
    BadRequestError,
    NotFoundError,
    OutlineSyncError,
    PermissionDeniedError,
    StorageError,
)
from outline_sync.ids import ROOT_NAV_ID

__all__ = [
    "ROOT_NAV_ID",
    "BadRequestError",
    "NotFoundError",
    "OutlineSyncError",
    "PermissionDeniedError",
    "Settings",
    "StorageError",
    "load_settings",
]

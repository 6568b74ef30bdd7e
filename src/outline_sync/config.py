"""Configuration for outline-sync.

Settings are read from the environment once, at startup, and handed to the CLI
and the MCP server by reference.
"""

import os
from dataclasses import dataclass
from pathlib import Path

# Directory with data. First directory which is found is used.
DATA_DIRECTORIES: list[Path] = [
    Path("~/.local/share/outline-sync").expanduser(),
    Path("~/.outline-sync").expanduser(),
]

DB_FILENAME = "outline.db"

# Response size bounds for paged listings.
DEFAULT_NAV_PAGE_SIZE = 1000
MAX_NAV_PAGE_SIZE = 5000
DEFAULT_NOTE_PAGE_SIZE = 100
MAX_NOTE_PAGE_SIZE = 1000

MAX_DATABASES_PER_ACCOUNT = 5


def resolve_data_directory() -> Path:
    """Return the first existing data directory, or the first candidate if none exist."""
    for candidate in DATA_DIRECTORIES:
        if candidate.is_dir():
            return candidate
    return DATA_DIRECTORIES[0]


@dataclass(frozen=True)
class Settings:
    """Process-wide immutable configuration."""

    data_dir: Path
    account_id: int = 1
    nav_page_size_max: int = MAX_NAV_PAGE_SIZE
    note_page_size_max: int = MAX_NOTE_PAGE_SIZE
    max_databases_per_account: int = MAX_DATABASES_PER_ACCOUNT

    @property
    def db_path(self) -> Path:
        return self.data_dir / DB_FILENAME


def load_settings(
    *,
    data_dir: Path | None = None,
    account_id: int | None = None,
) -> Settings:
    """Build Settings from explicit overrides, then the environment, then defaults.

    Environment:
        OUTLINE_SYNC_DATA_DIR: directory holding outline.db.
        OUTLINE_SYNC_ACCOUNT_ID: account attributed to local writes.
    """
    if data_dir is None:
        env_dir = os.environ.get("OUTLINE_SYNC_DATA_DIR")
        data_dir = Path(env_dir).expanduser() if env_dir else resolve_data_directory()

    if account_id is None:
        env_account = os.environ.get("OUTLINE_SYNC_ACCOUNT_ID")
        try:
            account_id = int(env_account) if env_account else 1
        except ValueError:
            msg = f"OUTLINE_SYNC_ACCOUNT_ID must be an integer, got {env_account!r}"
            raise RuntimeError(msg) from None

    return Settings(data_dir=data_dir, account_id=account_id)

"""Expand uploaded files into individual JSON documents."""

import io
import zipfile
import zlib

from outline_sync.errors import BadRequestError


def collect_json_files(filename: str, data: bytes) -> list[tuple[str, bytes]]:
    """Return (name, bytes) for each document in an upload.

    A `.zip` upload yields every non-directory entry ending in `.json`
    (case-insensitive); other entries are skipped. Anything else is taken to be
    a single JSON document.

    Raises:
        BadRequestError: the zip cannot be opened or an entry cannot be read.
    """
    if not filename.lower().endswith(".zip"):
        return [(filename, data)]

    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except zipfile.BadZipFile as e:
        raise BadRequestError(f"Invalid ZIP file {filename}: {e}") from e

    files: list[tuple[str, bytes]] = []
    with archive:
        for entry in archive.infolist():
            if entry.is_dir() or not entry.filename.lower().endswith(".json"):
                continue
            try:
                files.append((entry.filename, archive.read(entry)))
            except (zipfile.BadZipFile, RuntimeError, OSError, zlib.error) as e:
                raise BadRequestError(
                    f"Failed to read ZIP entry {entry.filename}: {e}"
                ) from e
    return files

"""Tests for expanding uploads into documents."""

import pytest

from outline_sync.core.importer.archive_reader import collect_json_files
from outline_sync.errors import BadRequestError
from tests.unit.factories import make_zip


def test_plain_file_is_one_document() -> None:
    assert collect_json_files("note.json", b"{}") == [("note.json", b"{}")]


def test_zip_keeps_only_json_entries() -> None:
    data = make_zip(
        {
            "export/": b"",
            "export/a.json": b"1",
            "export/B.JSON": b"2",
            "export/readme.txt": b"skip",
            "export/image.png": b"skip",
        }
    )

    files = collect_json_files("Backup.ZIP", data)

    assert files == [("export/a.json", b"1"), ("export/B.JSON", b"2")]


def test_invalid_zip_is_bad_request() -> None:
    with pytest.raises(BadRequestError, match="Invalid ZIP file broken.zip"):
        collect_json_files("broken.zip", b"definitely not a zip")

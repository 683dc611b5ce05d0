"""Pytest configuration for repository test runs."""

from __future__ import annotations

import struct
import sys
from pathlib import Path
from typing import Callable, Iterable, Union
import zipfile

import pytest

ZipEntryDef = tuple[Union[str, zipfile.ZipInfo], bytes]
ZipFactory = Callable[..., Path]


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


@pytest.fixture(autouse=True)
def _quiet_run_logs() -> None:
    """Reset operational logging to its default level for each test."""
    from core.logging_config import configure_logging

    configure_logging()


@pytest.fixture
def make_zip(tmp_path: Path) -> ZipFactory:
    """Return a factory writing zip archives under tmp_path.

    Entries given by name get a fixed 2024-01-02T03:04:06 timestamp.
    """

    def _make_zip(
        file_name: str,
        entries: Iterable[ZipEntryDef],
        compression: int = zipfile.ZIP_STORED,
    ) -> Path:
        archive_path = tmp_path / file_name
        with zipfile.ZipFile(archive_path, "w") as archive:
            for entry, content in entries:
                info = entry if isinstance(entry, zipfile.ZipInfo) else _zip_info(entry)
                info.compress_type = compression
                archive.writestr(info, content)
        return archive_path

    return _make_zip


def _zip_info(name: str) -> zipfile.ZipInfo:
    return zipfile.ZipInfo(name, date_time=(2024, 1, 2, 3, 4, 6))


@pytest.fixture
def patch_central_record() -> Callable[[bytes, int, int, int], bytes]:
    """Return a helper overwriting a 16-bit field of one central-directory record.

    Offsets are relative to the record signature: 6 is the version
    needed to extract, 8 the flag bits, 10 the compression method.
    """

    def _patch(archive_bytes: bytes, entry_index: int, field_offset: int, value: int) -> bytes:
        patched = bytearray(archive_bytes)
        position = -1
        for _ in range(entry_index + 1):
            position = patched.index(b"PK\x01\x02", position + 1)
        struct.pack_into("<H", patched, position + field_offset, value)
        return bytes(patched)

    return _patch

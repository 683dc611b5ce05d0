"""Zip archive entry enumeration.

This module opens an in-memory archive buffer, exposes its entries
lazily in central-directory order, and resolves each entry to its
decompressed bytes under a per-entry ceiling.
"""

from __future__ import annotations

import io
import lzma
import struct
import zipfile
import zlib
from types import TracebackType
from typing import Iterator

from core.constants import (
    ZIP_CENTRAL_DIRECTORY_SIGNATURE,
    ZIP_END_OF_CENTRAL_DIRECTORY_SIGNATURE,
    ZIP_END_RECORD_SEARCH_WINDOW,
    ZIP_LEGACY_NAME_ENCODING,
    ZIP_LOCAL_HEADER_SIGNATURE,
    ZIP_UTF8_NAME_FLAG,
)
from core.errors import (
    ZipBlobsArchiveError,
    ZipBlobsEntryError,
    ZipBlobsReadError,
    ZipBlobsSizeLimitError,
)
from core.types import EntryHeader
from ingest.bounded_reader import read_bounded

_ARCHIVE_PARSE_ERRORS = (
    zipfile.BadZipFile,
    zipfile.LargeZipFile,
    NotImplementedError,
    struct.error,
    EOFError,
    OSError,
    ValueError,
)

_ENTRY_RESOLUTION_ERRORS = (
    zipfile.BadZipFile,
    NotImplementedError,
    RuntimeError,
    EOFError,
    zlib.error,
    lzma.LZMAError,
    struct.error,
    OSError,
    ValueError,
)


class ZipEntryReader:
    """Single-archive reader over a fully loaded byte buffer."""

    def __init__(self, buffer: bytes) -> None:
        """Parse the archive's central directory.

        Names flagged as UTF-8 that do not decode are reread through
        cp437 so every entry keeps its stored name bytes.

        Args:
            buffer: Complete archive bytes.

        Raises:
            ZipBlobsArchiveError: If the buffer is not a readable zip archive.
        """
        try:
            self._archive = zipfile.ZipFile(io.BytesIO(buffer))
        except UnicodeDecodeError:
            self._archive = _open_with_legacy_names(buffer)
        except _ARCHIVE_PARSE_ERRORS as error:
            raise ZipBlobsArchiveError(f"not a readable zip archive: {error}") from error

    def __enter__(self) -> "ZipEntryReader":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Release the underlying zipfile handle."""
        self._archive.close()

    def entries(self) -> Iterator[EntryHeader]:
        """Yield entry headers lazily in central-directory order.

        Yields:
            One header per central-directory record, directories included.
        """
        for index, info in enumerate(self._archive.infolist()):
            yield build_entry_header(index, info)

    def read_entry(self, header: EntryHeader, limit: int) -> bytes:
        """Decompress one entry under a byte ceiling.

        Args:
            header: Header previously yielded by :meth:`entries`.
            limit: Maximum accepted decompressed byte count.

        Returns:
            The entry's decompressed bytes.

        Raises:
            ZipBlobsSizeLimitError: If the entry decompresses to more than ``limit`` bytes.
            ZipBlobsEntryError: If the entry is corrupt, encrypted, or uses an
                unsupported compression method.
        """
        try:
            with self._archive.open(header.zip_info) as stream:
                return read_bounded(stream, limit)
        except (ZipBlobsSizeLimitError, ZipBlobsEntryError):
            raise
        except ZipBlobsReadError as error:
            raise ZipBlobsEntryError(str(error)) from error
        except _ENTRY_RESOLUTION_ERRORS as error:
            raise ZipBlobsEntryError(str(error) or type(error).__name__) from error


def build_entry_header(index: int, info: zipfile.ZipInfo) -> EntryHeader:
    """Project a zipfile record onto an :class:`EntryHeader`.

    Args:
        index: Position in central-directory order.
        info: Parsed zipfile record.

    Returns:
        Entry header with a lossily decoded name.
    """
    raw_name = raw_entry_name(info)
    return EntryHeader(
        index=index,
        name=raw_name.decode("utf-8", errors="replace"),
        raw_name=raw_name,
        declared_size=info.file_size,
        compressed_size=info.compress_size,
        compress_type=info.compress_type,
        date_time=tuple(info.date_time),
        extra=bytes(info.extra),
        is_dir=info.is_dir(),
        zip_info=info,
    )


def raw_entry_name(info: zipfile.ZipInfo) -> bytes:
    """Recover the entry name bytes as stored in the archive.

    zipfile decodes names without the UTF-8 flag as cp437, which maps
    every byte, so re-encoding restores the stored bytes exactly.
    """
    if info.flag_bits & ZIP_UTF8_NAME_FLAG:
        return info.orig_filename.encode("utf-8")
    return info.orig_filename.encode(ZIP_LEGACY_NAME_ENCODING)


def clear_utf8_name_flags(buffer: bytes) -> bytearray:
    """Copy an archive with the UTF-8 name flag cleared on every header.

    Both the central-directory record and the local header of each
    entry are patched, since zipfile compares the two names on open.

    Args:
        buffer: Complete archive bytes.

    Returns:
        Patched copy of the archive.

    Raises:
        ZipBlobsArchiveError: If the central directory cannot be walked.
    """
    patched = bytearray(buffer)
    try:
        position, entry_count, base_offset = _locate_central_directory(buffer)
        for _ in range(entry_count):
            if buffer[position : position + 4] != ZIP_CENTRAL_DIRECTORY_SIGNATURE:
                raise ZipBlobsArchiveError("bad central directory record signature")
            _clear_name_flag(patched, position + 8)
            name_length, extra_length, comment_length = struct.unpack_from(
                "<3H", buffer, position + 28
            )
            (local_offset,) = struct.unpack_from("<L", buffer, position + 42)
            local_position = base_offset + local_offset
            if buffer[local_position : local_position + 4] == ZIP_LOCAL_HEADER_SIGNATURE:
                _clear_name_flag(patched, local_position + 6)
            position += 46 + name_length + extra_length + comment_length
    except struct.error as error:
        raise ZipBlobsArchiveError(f"not a readable zip archive: {error}") from error
    return patched


def _open_with_legacy_names(buffer: bytes) -> zipfile.ZipFile:
    try:
        return zipfile.ZipFile(io.BytesIO(clear_utf8_name_flags(buffer)))
    except _ARCHIVE_PARSE_ERRORS as error:
        raise ZipBlobsArchiveError(f"not a readable zip archive: {error}") from error


def _locate_central_directory(buffer: bytes) -> tuple[int, int, int]:
    """Return central directory start, entry count, and prepended byte count.

    Zip64 end records are not followed.
    """
    search_start = max(0, len(buffer) - ZIP_END_RECORD_SEARCH_WINDOW)
    end_position = buffer.rfind(ZIP_END_OF_CENTRAL_DIRECTORY_SIGNATURE, search_start)
    if end_position < 0:
        raise ZipBlobsArchiveError("end of central directory record not found")
    entry_count, directory_size, directory_offset = struct.unpack_from(
        "<HLL", buffer, end_position + 10
    )
    if entry_count == 0xFFFF or 0xFFFFFFFF in (directory_size, directory_offset):
        raise ZipBlobsArchiveError("zip64 archives with undecodable names are not supported")
    directory_start = end_position - directory_size
    if directory_start < 0:
        raise ZipBlobsArchiveError("central directory size exceeds archive")
    return directory_start, entry_count, directory_start - directory_offset


def _clear_name_flag(patched: bytearray, flag_position: int) -> None:
    (flag_bits,) = struct.unpack_from("<H", patched, flag_position)
    struct.pack_into("<H", patched, flag_position, flag_bits & ~ZIP_UTF8_NAME_FLAG)

"""Shared typed models.

This module defines immutable data models used by the filename source,
archive reader, record builder, and pipeline driver to keep interfaces
explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Union
import zipfile

from core.constants import (
    CONTENT_TRANSFER_ENCODING,
    DEFAULT_CONTENT_ENCODING,
    DEFAULT_CONTENT_TYPE,
    DEFAULT_ITEM_SIZE_MAX,
    DEFAULT_ZIP_SIZE_MAX,
)
from core.errors import ZipBlobsConfigError


@dataclass(frozen=True)
class PipelineOptions:
    """Process-wide conversion options.

    Attributes:
        zip_size_max: Archives larger than this many bytes are skipped.
        item_size_max: Entries larger than this many decompressed bytes are skipped.
        content_type: Content type stamped on every record.
        content_encoding: Content encoding stamped on every record.
        verbose: Emit one diagnostic line per skipped archive or entry.
    """

    zip_size_max: int = DEFAULT_ZIP_SIZE_MAX
    item_size_max: int = DEFAULT_ITEM_SIZE_MAX
    content_type: str = DEFAULT_CONTENT_TYPE
    content_encoding: str = DEFAULT_CONTENT_ENCODING
    verbose: bool = False

    def __post_init__(self) -> None:
        if self.zip_size_max < 0 or self.item_size_max < 0:
            raise ZipBlobsConfigError(
                "Size ceilings must be >= 0, got "
                f"zip_size_max={self.zip_size_max} item_size_max={self.item_size_max}."
            )


@dataclass(frozen=True)
class ArchiveTask:
    """One archive filename read from the input stream.

    Attributes:
        path: Filesystem path exactly as received, without line terminator.
    """

    path: str


@dataclass(frozen=True)
class FilenameReadFailure:
    """An input line that could not be turned into a filename.

    Attributes:
        line_number: One-based input line number.
        reason: Human-readable cause.
    """

    line_number: int
    reason: str


FilenameResult = Union[ArchiveTask, FilenameReadFailure]


@dataclass(frozen=True)
class EntryHeader:
    """Metadata for one zip entry, valid for one enumeration step.

    Attributes:
        index: Position in central-directory order.
        name: Entry path decoded lossily as UTF-8.
        raw_name: Entry path bytes as stored in the archive.
        declared_size: Uncompressed size claimed by the central directory.
        compressed_size: Stored (compressed) size in bytes.
        compress_type: Zip compression method id.
        date_time: MS-DOS timestamp fields (year, month, day, hour, minute, second).
        extra: Raw central-directory extra field bytes.
        is_dir: Whether the entry names a directory.
        zip_info: Underlying zipfile record used to resolve the payload.
    """

    index: int
    name: str
    raw_name: bytes
    declared_size: int
    compressed_size: int
    compress_type: int
    date_time: tuple[int, int, int, int, int, int]
    extra: bytes
    is_dir: bool
    zip_info: zipfile.ZipInfo = field(repr=False, compare=False)


@dataclass(frozen=True)
class BlobMetadata:
    """Record metadata object.

    Attributes:
        zip_name: Path of the archive the entry came from.
    """

    zip_name: str


@dataclass(frozen=True)
class BlobRecord:
    """One emitted JSON record for one archive entry.

    Attributes:
        name: Entry path.
        content_type: Configured content type.
        content_encoding: Configured content encoding.
        content_transfer_encoding: Always ``base64``.
        body: Base64 text of the entry bytes.
        metadata: Source archive metadata.
        content_length: Decoded entry byte count.
        last_modified: Entry modification time in UTC.
    """

    name: str
    content_type: str
    content_encoding: str
    body: str
    metadata: BlobMetadata
    content_length: int
    last_modified: datetime
    content_transfer_encoding: str = CONTENT_TRANSFER_ENCODING


@dataclass(frozen=True)
class ConversionSummary:
    """Counters describing one pipeline run.

    Attributes:
        archives_seen: Filenames received.
        archives_converted: Archives fully enumerated.
        archives_skipped: Archives skipped while loading (size or I/O).
        archives_failed: Archives that could not be parsed.
        entries_emitted: Records written to the sink.
        entries_skipped: Entries skipped for size or resolution failures.
        filename_errors: Input lines that could not be decoded.
    """

    archives_seen: int = 0
    archives_converted: int = 0
    archives_skipped: int = 0
    archives_failed: int = 0
    entries_emitted: int = 0
    entries_skipped: int = 0
    filename_errors: int = 0

"""zipblobs exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Skip-class errors carry a ``reason`` tag so the pipeline can branch
on the error type and report it without matching message text.
"""

from __future__ import annotations


class ZipBlobsError(Exception):
    """Base exception for all zipblobs failures."""

    reason = "error"


class ZipBlobsConfigError(ZipBlobsError):
    """Raised for invalid runtime configuration."""

    reason = "config_error"


class ZipBlobsReadError(ZipBlobsError):
    """Raised when a byte source cannot be opened or read."""

    reason = "read_error"


class ZipBlobsSizeLimitError(ZipBlobsError):
    """Raised when a byte source holds more bytes than its ceiling."""

    reason = "size_limit_exceeded"

    def __init__(self, limit: int) -> None:
        super().__init__(f"size exceeds limit of {limit} bytes")
        self.limit = limit


class ZipBlobsArchiveError(ZipBlobsError):
    """Raised when a buffer cannot be parsed as a zip archive."""

    reason = "parse_error"


class ZipBlobsEntryError(ZipBlobsError):
    """Raised when one archive entry cannot be decompressed."""

    reason = "entry_error"


class ZipBlobsOutputError(ZipBlobsError):
    """Raised when the JSON output sink rejects a write."""

    reason = "output_error"

"""Size-capped byte readers.

This module loads byte sources into memory under a byte ceiling.
At most ``limit + 1`` bytes are ever requested from a source, so an
oversized or unbounded source cannot exhaust memory.
"""

from __future__ import annotations

import io
from pathlib import Path
from typing import BinaryIO

from core.constants import READ_CHUNK_SIZE
from core.errors import ZipBlobsReadError, ZipBlobsSizeLimitError


def read_bounded(source: BinaryIO, limit: int, chunk_size: int = READ_CHUNK_SIZE) -> bytes:
    """Read a whole byte source if it holds at most ``limit`` bytes.

    Args:
        source: Readable binary file-like object.
        limit: Maximum accepted byte count.
        chunk_size: Largest single read request.

    Returns:
        Exactly the bytes of the source.

    Raises:
        ValueError: If limit or chunk size is invalid.
        ZipBlobsSizeLimitError: If the source holds more than ``limit`` bytes.
        ZipBlobsReadError: If the source raises an I/O error.
    """
    if limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be > 0, got {chunk_size}")
    # getvalue() hands over the BytesIO storage instead of copying it.
    buffer = io.BytesIO()
    remaining = limit + 1
    try:
        while remaining > 0:
            chunk = source.read(min(chunk_size, remaining))
            if not chunk:
                break
            buffer.write(chunk)
            remaining -= len(chunk)
    except OSError as error:
        raise ZipBlobsReadError(str(error)) from error
    if buffer.tell() > limit:
        raise ZipBlobsSizeLimitError(limit)
    return buffer.getvalue()


def read_file_bounded(path: str | Path, limit: int) -> bytes:
    """Open a file and read it under a byte ceiling.

    Args:
        path: Filesystem path.
        limit: Maximum accepted byte count.

    Returns:
        File bytes.

    Raises:
        ZipBlobsSizeLimitError: If the file is larger than ``limit``.
        ZipBlobsReadError: If the file cannot be opened or read.
    """
    try:
        source = open(path, "rb")
    except (OSError, ValueError) as error:
        raise ZipBlobsReadError(str(error)) from error
    with source:
        return read_bounded(source, limit)

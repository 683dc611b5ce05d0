"""Archive filename source.

This module turns a line-oriented byte stream into archive tasks.
Undecodable lines become failure results so the run can continue.
"""

from __future__ import annotations

from typing import BinaryIO, Iterator

from core.types import ArchiveTask, FilenameReadFailure, FilenameResult


def iter_archive_tasks(stream: BinaryIO) -> Iterator[FilenameResult]:
    """Yield one result per input line.

    Args:
        stream: Binary stream with one path per line.

    Yields:
        ``ArchiveTask`` for each UTF-8 line, ``FilenameReadFailure`` otherwise.

    Raises:
        OSError: If the stream itself cannot be read.
    """
    for line_number, raw_line in enumerate(stream, 1):
        try:
            path = _strip_line_terminator(raw_line).decode("utf-8")
        except UnicodeDecodeError as error:
            yield FilenameReadFailure(
                line_number=line_number,
                reason=f"stream did not contain valid UTF-8: {error.reason}",
            )
            continue
        yield ArchiveTask(path=path)


def _strip_line_terminator(raw_line: bytes) -> bytes:
    """Remove one trailing ``\\n`` or ``\\r\\n``."""
    if raw_line.endswith(b"\n"):
        raw_line = raw_line[:-1]
        if raw_line.endswith(b"\r"):
            raw_line = raw_line[:-1]
    return raw_line

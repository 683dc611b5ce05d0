"""Zip entry timestamp normalization.

This module turns zip modification times into UTC datetimes.
MS-DOS fields carry no zone and are read as UTC without conversion.
Invalid dates and times fall back to defaults instead of failing.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
import struct
from typing import Iterator, Sequence

from core.constants import (
    EXTENDED_TIMESTAMP_EXTRA_ID,
    FALLBACK_DATE,
    FALLBACK_TIME,
    NTFS_EXTRA_ID,
    NTFS_TIMES_ATTRIBUTE_TAG,
)
from core.types import EntryHeader

_NTFS_EPOCH = datetime(1601, 1, 1, tzinfo=timezone.utc)


def normalize_zip_datetime(fields: Sequence[object]) -> datetime:
    """Build a UTC datetime from MS-DOS timestamp fields.

    Args:
        fields: ``(year, month, day, hour, minute, second)``.

    Returns:
        Timezone-aware UTC datetime. The date falls back to 1970-01-01 and
        the time-of-day to 00:00:00, each independently, when invalid.
    """
    values = [_as_int(value) for value in fields]
    if len(values) != 6:
        values = [None] * 6
    year, month, day, hour, minute, second = values
    return datetime.combine(
        _build_date(year, month, day),
        _build_time(hour, minute, second),
        tzinfo=timezone.utc,
    )


def entry_last_modified(header: EntryHeader) -> datetime:
    """Return the best modification time an entry carries.

    Extra-field times are true UTC and win over the zone-less DOS fields.

    Args:
        header: Entry header.

    Returns:
        UTC modification time.
    """
    extra_time = extra_field_mtime(header.extra)
    if extra_time is not None:
        return extra_time
    return normalize_zip_datetime(header.date_time)


def extra_field_mtime(extra: bytes) -> datetime | None:
    """Extract a UTC mtime from extended-timestamp or NTFS extra fields.

    Args:
        extra: Raw extra field bytes.

    Returns:
        UTC modification time, or None when absent or malformed.
    """
    records = dict(_iter_extra_records(extra))
    ut_data = records.get(EXTENDED_TIMESTAMP_EXTRA_ID)
    if ut_data is not None:
        parsed = _parse_extended_timestamp(ut_data)
        if parsed is not None:
            return parsed
    ntfs_data = records.get(NTFS_EXTRA_ID)
    if ntfs_data is not None:
        return _parse_ntfs_times(ntfs_data)
    return None


def format_rfc3339(value: datetime) -> str:
    """Render a datetime as RFC 3339 text with a UTC offset."""
    return value.astimezone(timezone.utc).isoformat()


def _build_date(year: int | None, month: int | None, day: int | None) -> date:
    try:
        return date(year, month, day)  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        return date(*FALLBACK_DATE)


def _build_time(hour: int | None, minute: int | None, second: int | None) -> time:
    try:
        return time(hour, minute, second)  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        return time(*FALLBACK_TIME)


def _as_int(value: object) -> int | None:
    """Accept ints and integral strings; anything else is invalid."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value))
    except ValueError:
        return None


def _iter_extra_records(extra: bytes) -> Iterator[tuple[int, bytes]]:
    """Walk ``(header id, data)`` records of a zip extra field."""
    offset = 0
    while offset + 4 <= len(extra):
        header_id, size = struct.unpack_from("<HH", extra, offset)
        offset += 4
        if offset + size > len(extra):
            return
        yield header_id, extra[offset : offset + size]
        offset += size


def _parse_extended_timestamp(data: bytes) -> datetime | None:
    """Parse the mtime of an Info-ZIP ``UT`` record."""
    if len(data) < 5 or not data[0] & 0x01:
        return None
    (mtime,) = struct.unpack_from("<i", data, 1)
    try:
        return datetime.fromtimestamp(mtime, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def _parse_ntfs_times(data: bytes) -> datetime | None:
    """Parse the mtime of an NTFS extra record (100ns ticks since 1601)."""
    offset = 4
    while offset + 4 <= len(data):
        tag, size = struct.unpack_from("<HH", data, offset)
        offset += 4
        if tag == NTFS_TIMES_ATTRIBUTE_TAG and size >= 24 and offset + 24 <= len(data):
            (ticks,) = struct.unpack_from("<Q", data, offset)
            try:
                return _NTFS_EPOCH + timedelta(microseconds=ticks // 10)
            except OverflowError:
                return None
        offset += size
    return None

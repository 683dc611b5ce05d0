"""Blob record construction.

This module turns one decoded archive entry into an output record.
It is a pure transform; size checks happen upstream.
"""

from __future__ import annotations

import base64
from datetime import datetime

from core.constants import CONTENT_TRANSFER_ENCODING
from core.types import BlobMetadata, BlobRecord


def build_blob_record(
    name: str,
    payload: bytes,
    last_modified: datetime,
    zip_name: str,
    content_type: str,
    content_encoding: str,
) -> BlobRecord:
    """Build a record carrying base64 content and entry metadata.

    Args:
        name: Entry path.
        payload: Decompressed entry bytes.
        last_modified: Entry modification time in UTC.
        zip_name: Path of the source archive.
        content_type: Content type stamped on the record.
        content_encoding: Content encoding stamped on the record.

    Returns:
        Record whose ``content_length`` is the decoded byte count.
    """
    return BlobRecord(
        name=name,
        content_type=content_type,
        content_encoding=content_encoding,
        content_transfer_encoding=CONTENT_TRANSFER_ENCODING,
        body=base64.b64encode(payload).decode("ascii"),
        metadata=BlobMetadata(zip_name=zip_name),
        content_length=len(payload),
        last_modified=last_modified,
    )

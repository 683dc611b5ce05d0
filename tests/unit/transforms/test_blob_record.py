"""Unit tests for blob record construction."""

from __future__ import annotations

import base64
from datetime import datetime, timezone

from transforms.blob_record import build_blob_record


def test_build_blob_record_encodes_payload_and_metadata() -> None:
    """Record should carry base64 body, decoded length, and archive name."""
    modified = datetime(2024, 1, 2, 3, 4, 6, tzinfo=timezone.utc)

    record = build_blob_record(
        name="dir/a.txt",
        payload=b"hello",
        last_modified=modified,
        zip_name="/data/a.zip",
        content_type="text/plain",
        content_encoding="identity",
    )

    assert record.body == "aGVsbG8="
    assert record.content_length == 5
    assert record.content_transfer_encoding == "base64"
    assert record.metadata.zip_name == "/data/a.zip"
    assert record.last_modified == modified


def test_build_blob_record_handles_empty_and_binary_payloads() -> None:
    """Empty and non-text payloads should round-trip through base64."""
    modified = datetime(1970, 1, 1, tzinfo=timezone.utc)
    payload = bytes(range(256))

    empty_record = build_blob_record("e", b"", modified, "z", "t", "e")
    binary_record = build_blob_record("b", payload, modified, "z", "t", "e")

    assert empty_record.body == "" and empty_record.content_length == 0
    assert base64.b64decode(binary_record.body) == payload
    assert binary_record.content_length == 256

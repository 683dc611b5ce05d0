"""Shared JSONL serialization for BlobRecord payloads.

This module centralizes BlobRecord JSON serialization logic.
It is used by the pipeline sink and by readers of emitted streams.
"""

from __future__ import annotations

from datetime import datetime
import json
from typing import Any, BinaryIO

from core.constants import ZIP_NAME_METADATA_KEY
from core.errors import ZipBlobsOutputError
from core.types import BlobMetadata, BlobRecord
from transforms.zip_timestamp import format_rfc3339


def blob_record_to_payload(record: BlobRecord) -> dict[str, object]:
    """Serialize BlobRecord into a JSON-safe payload.

    Key order is part of the output format.

    Args:
        record: Blob record instance.

    Returns:
        Dictionary payload for JSON encoding.
    """
    return {
        "name": record.name,
        "content_type": record.content_type,
        "content_encoding": record.content_encoding,
        "content_transfer_encoding": record.content_transfer_encoding,
        "body": record.body,
        "metadata": {ZIP_NAME_METADATA_KEY: record.metadata.zip_name},
        "content_length": record.content_length,
        "last_modified": format_rfc3339(record.last_modified),
    }


def blob_record_from_payload(payload: dict[str, Any]) -> BlobRecord:
    """Deserialize JSON payload into BlobRecord.

    Args:
        payload: Serialized record payload.

    Returns:
        Parsed BlobRecord.
    """
    metadata_payload = payload.get("metadata")
    metadata_dict = metadata_payload if isinstance(metadata_payload, dict) else {}
    return BlobRecord(
        name=str(payload.get("name", "")),
        content_type=str(payload.get("content_type", "")),
        content_encoding=str(payload.get("content_encoding", "")),
        content_transfer_encoding=str(payload.get("content_transfer_encoding", "")),
        body=str(payload.get("body", "")),
        metadata=BlobMetadata(zip_name=str(metadata_dict.get(ZIP_NAME_METADATA_KEY, ""))),
        content_length=int(payload.get("content_length", 0)),
        last_modified=datetime.fromisoformat(str(payload["last_modified"])),
    )


def serialize_blob_record(record: BlobRecord) -> bytes:
    """Encode one record as a compact UTF-8 JSON line.

    Args:
        record: Blob record instance.

    Returns:
        JSON object bytes followed by ``\\n``.
    """
    line = json.dumps(blob_record_to_payload(record), ensure_ascii=False, separators=(",", ":"))
    return line.encode("utf-8") + b"\n"


def write_blob_record(sink: BinaryIO, record: BlobRecord) -> None:
    """Write one record line to a binary sink.

    Args:
        sink: Writable binary stream.
        record: Record to serialize.

    Raises:
        ZipBlobsOutputError: If the sink rejects the write.
    """
    try:
        sink.write(serialize_blob_record(record))
    except OSError as error:
        raise ZipBlobsOutputError(f"Failed to write record {record.name!r}: {error}") from error


def read_blob_records_jsonl(lines: bytes) -> list[BlobRecord]:
    """Parse an emitted JSONL byte stream back into records.

    Args:
        lines: UTF-8 JSONL bytes.

    Returns:
        Parsed records in stream order.

    Raises:
        ValueError: If a line is not a JSON object.
    """
    records: list[BlobRecord] = []
    for line_number, line in enumerate(lines.decode("utf-8").split("\n"), 1):
        if not line.strip():
            continue
        records.append(blob_record_from_payload(_parse_payload_line(line, line_number)))
    return records


def _parse_payload_line(line: str, line_number: int) -> dict[str, Any]:
    """Parse and validate one JSONL payload row.

    Args:
        line: Raw JSONL line.
        line_number: One-based line number.

    Returns:
        Parsed payload dictionary.

    Raises:
        ValueError: If JSON row is invalid.
    """
    try:
        payload = json.loads(line)
    except json.JSONDecodeError as error:
        raise ValueError(f"Invalid JSON at line {line_number}: {error.msg}") from error
    if not isinstance(payload, dict):
        raise ValueError(f"Invalid payload at line {line_number}: expected JSON object")
    return payload

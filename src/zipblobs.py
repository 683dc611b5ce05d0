"""Public SDK surface for zipblobs.

This module provides a stable import path for library users.
It re-exports the pipeline entry points and typed option models.
"""

from __future__ import annotations

from core.config import ZipBlobsConfig
from core.errors import (
    ZipBlobsArchiveError,
    ZipBlobsConfigError,
    ZipBlobsEntryError,
    ZipBlobsError,
    ZipBlobsOutputError,
    ZipBlobsReadError,
    ZipBlobsSizeLimitError,
)
from core.logging_config import build_diagnostic_logger
from core.types import ArchiveTask, BlobRecord, ConversionSummary, PipelineOptions
from ingest.bounded_reader import read_bounded, read_file_bounded
from ingest.pipeline import convert_archives, convert_stream
from ingest.zip_entries import ZipEntryReader
from store.record_payload import read_blob_records_jsonl, serialize_blob_record
from transforms.blob_record import build_blob_record
from transforms.zip_timestamp import normalize_zip_datetime

__all__ = [
    "ArchiveTask",
    "BlobRecord",
    "ConversionSummary",
    "PipelineOptions",
    "ZipBlobsArchiveError",
    "ZipBlobsConfig",
    "ZipBlobsConfigError",
    "ZipBlobsEntryError",
    "ZipBlobsError",
    "ZipBlobsOutputError",
    "ZipBlobsReadError",
    "ZipBlobsSizeLimitError",
    "ZipEntryReader",
    "build_blob_record",
    "build_diagnostic_logger",
    "convert_archives",
    "convert_stream",
    "normalize_zip_datetime",
    "read_blob_records_jsonl",
    "read_bounded",
    "read_file_bounded",
    "serialize_blob_record",
]

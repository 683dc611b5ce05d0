"""Archive-to-record conversion pipeline.

This module drives the per-archive state machine: load the archive
under its ceiling, parse it, then enumerate entries and stream one
JSON line per qualifying entry. Per-archive and per-entry failures
degrade to a skip and a diagnostic; the run always continues.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import asdict
import sys
from typing import Any, BinaryIO, Iterable, TextIO

from core.errors import (
    ZipBlobsArchiveError,
    ZipBlobsEntryError,
    ZipBlobsOutputError,
    ZipBlobsReadError,
    ZipBlobsSizeLimitError,
)
from core.logging_config import build_diagnostic_logger, get_logger
from core.types import (
    ArchiveTask,
    ConversionSummary,
    EntryHeader,
    FilenameReadFailure,
    FilenameResult,
    PipelineOptions,
)
from ingest.bounded_reader import read_file_bounded
from ingest.filename_source import iter_archive_tasks
from ingest.zip_entries import ZipEntryReader
from store.record_payload import write_blob_record
from transforms.blob_record import build_blob_record
from transforms.zip_timestamp import entry_last_modified

_LOGGER = get_logger(__name__)


class ArchivePipelineRunner:
    """Sequential runner converting archives into JSON record lines."""

    def __init__(self, options: PipelineOptions, sink: BinaryIO, diagnostics: Any) -> None:
        self._options = options
        self._sink = sink
        self._diagnostics = diagnostics
        self._counts: Counter[str] = Counter()

    def run(self, items: Iterable[FilenameResult]) -> ConversionSummary:
        """Convert every archive named by ``items`` in input order.

        Args:
            items: Filename results from the filename source.

        Returns:
            Counters for the run.

        Raises:
            ZipBlobsOutputError: If the sink rejects a write.
        """
        for item in items:
            if isinstance(item, FilenameReadFailure):
                self._counts["filename_errors"] += 1
                self._diagnostics.warning(
                    "unrecoverable_error", reason=item.reason, line=item.line_number
                )
                continue
            self.convert_archive(item)
        summary = self.summary()
        _log_conversion_completion(self._options, summary)
        return summary

    def convert_archive(self, task: ArchiveTask) -> None:
        """Convert one archive, skipping it or its entries on failure."""
        self._counts["archives_seen"] += 1
        buffer = self._load_archive(task)
        if buffer is None:
            return
        try:
            reader = ZipEntryReader(buffer)
        except ZipBlobsArchiveError as error:
            self._counts["archives_failed"] += 1
            self._diagnostics.warning(
                "zip_processing_failed", path=task.path, reason=error.reason, error=str(error)
            )
            return
        with reader:
            for header in reader.entries():
                self._convert_entry(task, reader, header)
        self._counts["archives_converted"] += 1

    def summary(self) -> ConversionSummary:
        """Return counters accumulated so far."""
        return ConversionSummary(**self._counts)

    def _load_archive(self, task: ArchiveTask) -> bytes | None:
        try:
            return read_file_bounded(task.path, self._options.zip_size_max)
        except ZipBlobsSizeLimitError as error:
            self._diagnostics.warning("zip_skipped", reason=error.reason, path=task.path)
        except ZipBlobsReadError as error:
            self._diagnostics.warning(
                "zip_skipped", reason=error.reason, path=task.path, error=str(error)
            )
        self._counts["archives_skipped"] += 1
        return None

    def _convert_entry(
        self,
        task: ArchiveTask,
        reader: ZipEntryReader,
        header: EntryHeader,
    ) -> None:
        try:
            payload = reader.read_entry(header, self._options.item_size_max)
        except ZipBlobsSizeLimitError as error:
            self._counts["entries_skipped"] += 1
            self._diagnostics.warning(
                "item_skipped",
                reason=error.reason,
                path=task.path,
                item=header.name,
                size=header.declared_size,
            )
            return
        except ZipBlobsEntryError as error:
            self._counts["entries_skipped"] += 1
            self._diagnostics.warning(
                "item_skipped",
                reason=error.reason,
                path=task.path,
                item=header.name,
                error=str(error),
            )
            return
        record = build_blob_record(
            name=header.name,
            payload=payload,
            last_modified=entry_last_modified(header),
            zip_name=task.path,
            content_type=self._options.content_type,
            content_encoding=self._options.content_encoding,
        )
        write_blob_record(self._sink, record)
        self._counts["entries_emitted"] += 1


def convert_archives(
    items: Iterable[FilenameResult],
    options: PipelineOptions,
    sink: BinaryIO,
    diagnostics: Any | None = None,
) -> ConversionSummary:
    """Convert archives into JSON lines written to ``sink``.

    Args:
        items: Filename results in processing order.
        options: Conversion options.
        sink: Writable binary stream for JSON lines.
        diagnostics: Diagnostic logger; stderr-backed when omitted.

    Returns:
        Counters for the run.

    Raises:
        ZipBlobsOutputError: If the sink rejects a write.
    """
    if diagnostics is None:
        diagnostics = build_diagnostic_logger(sys.stderr, options.verbose)
    return ArchivePipelineRunner(options, sink, diagnostics).run(items)


def convert_stream(
    filenames: BinaryIO,
    sink: BinaryIO,
    options: PipelineOptions,
    diagnostic_stream: TextIO,
) -> ConversionSummary:
    """Read archive paths line by line and stream records to ``sink``.

    The sink is flushed once the filename stream is exhausted.

    Args:
        filenames: Binary stream with one archive path per line.
        sink: Writable binary stream for JSON lines.
        options: Conversion options.
        diagnostic_stream: Destination for verbose diagnostics.

    Returns:
        Counters for the run.

    Raises:
        OSError: If the filename stream cannot be read.
        ZipBlobsOutputError: If the sink rejects a write or flush.
    """
    diagnostics = build_diagnostic_logger(diagnostic_stream, options.verbose)
    summary = convert_archives(iter_archive_tasks(filenames), options, sink, diagnostics)
    try:
        sink.flush()
    except OSError as error:
        raise ZipBlobsOutputError(f"Failed to flush output: {error}") from error
    return summary


def convert_stdin_to_stdout(options: PipelineOptions) -> ConversionSummary:
    """Run the pipeline over process stdin, stdout, and stderr."""
    return convert_stream(sys.stdin.buffer, sys.stdout.buffer, options, sys.stderr)


def _log_conversion_completion(options: PipelineOptions, summary: ConversionSummary) -> None:
    """Log run completion with contextual metadata."""
    _LOGGER.info(
        "conversion_completed",
        zip_size_max=options.zip_size_max,
        item_size_max=options.item_size_max,
        **asdict(summary),
    )

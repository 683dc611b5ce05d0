"""Unit tests for the archive conversion pipeline."""

from __future__ import annotations

import base64
import io
import json
from pathlib import Path

import pytest

from core.errors import ZipBlobsOutputError
from core.logging_config import build_diagnostic_logger
from core.types import ArchiveTask, FilenameReadFailure, PipelineOptions
from ingest.pipeline import ArchivePipelineRunner, convert_archives, convert_stream


def _run(items, options: PipelineOptions) -> tuple[list[dict], list[str], object]:
    sink = io.BytesIO()
    diagnostic_stream = io.StringIO()
    diagnostics = build_diagnostic_logger(diagnostic_stream, options.verbose)
    summary = convert_archives(items, options, sink, diagnostics)
    records = [json.loads(line) for line in sink.getvalue().splitlines()]
    return records, diagnostic_stream.getvalue().splitlines(), summary


def test_pipeline_emits_one_record_per_entry_in_order(make_zip) -> None:
    """Each entry of each archive should yield one record, in input order."""
    first = make_zip("first.zip", [("b.txt", b"bee"), ("a.txt", b"ay")])
    second = make_zip("second.zip", [("c.txt", b"sea")])

    records, _, summary = _run(
        [ArchiveTask(str(first)), ArchiveTask(str(second))], PipelineOptions()
    )

    assert [(r["metadata"]["ZipName"], r["name"]) for r in records] == [
        (str(first), "b.txt"),
        (str(first), "a.txt"),
        (str(second), "c.txt"),
    ]
    assert summary.entries_emitted == 3
    assert summary.archives_converted == 2


def test_pipeline_records_match_entry_bytes(make_zip) -> None:
    """Body should decode to entry bytes and content_length should match."""
    content = b"\x00\x01binary\xff" * 50
    archive = make_zip("bin.zip", [("data.bin", content)])

    records, _, _ = _run([ArchiveTask(str(archive))], PipelineOptions())

    assert base64.b64decode(records[0]["body"]) == content
    assert records[0]["content_length"] == len(content)
    assert records[0]["last_modified"] == "2024-01-02T03:04:06+00:00"


def test_pipeline_stamps_configured_content_headers(make_zip) -> None:
    """Records should carry the configured content type and encoding."""
    archive = make_zip("a.zip", [("a.txt", b"hello")])
    options = PipelineOptions(content_type="text/plain", content_encoding="identical")

    records, _, _ = _run([ArchiveTask(str(archive))], options)

    assert records[0]["content_type"] == "text/plain"
    assert records[0]["content_encoding"] == "identical"
    assert records[0]["content_transfer_encoding"] == "base64"


def test_pipeline_skips_oversized_entries_only(make_zip) -> None:
    """Entries above the item ceiling should be skipped, siblings kept."""
    archive = make_zip("mixed.zip", [("small.txt", b"tiny"), ("large.txt", b"x" * 100)])
    options = PipelineOptions(item_size_max=10, verbose=True)

    records, diagnostics, summary = _run([ArchiveTask(str(archive))], options)

    assert [record["name"] for record in records] == ["small.txt"]
    assert diagnostics == [
        f"level:warn\tstatus:item_skipped\treason:size_limit_exceeded"
        f"\tpath:{archive}\titem:large.txt\tsize:100"
    ]
    assert summary.entries_skipped == 1


def test_pipeline_skips_corrupt_entries_and_continues(make_zip, tmp_path: Path) -> None:
    """A corrupt entry should not stop enumeration of later entries."""
    archive = make_zip("crc.zip", [("bad.txt", b"hello world"), ("good.txt", b"fine")])
    archive.write_bytes(archive.read_bytes().replace(b"hello world", b"jello world"))

    records, diagnostics, _ = _run(
        [ArchiveTask(str(archive))], PipelineOptions(verbose=True)
    )

    assert [record["name"] for record in records] == ["good.txt"]
    assert diagnostics[0].startswith("level:warn\tstatus:item_skipped\treason:entry_error")


def test_pipeline_skips_oversized_archive_without_affecting_siblings(make_zip) -> None:
    """Archives above the zip ceiling should yield nothing; others proceed."""
    big = make_zip("big.zip", [("a.txt", b"a" * 500)])
    small = make_zip("small.zip", [("b.txt", b"b")])
    options = PipelineOptions(zip_size_max=400, verbose=True)

    records, diagnostics, summary = _run(
        [ArchiveTask(str(big)), ArchiveTask(str(small))], options
    )

    assert [record["name"] for record in records] == ["b.txt"]
    assert diagnostics == [
        f"level:warn\tstatus:zip_skipped\treason:size_limit_exceeded\tpath:{big}"
    ]
    assert summary.archives_skipped == 1


def test_pipeline_reports_unparseable_archive(tmp_path: Path) -> None:
    """Non-zip files should be reported as processing failures."""
    bogus = tmp_path / "bogus.zip"
    bogus.write_bytes(b"definitely not a zip")

    records, diagnostics, summary = _run(
        [ArchiveTask(str(bogus))], PipelineOptions(verbose=True)
    )

    assert records == []
    assert diagnostics[0].startswith(
        f"level:warn\tstatus:zip_processing_failed\tpath:{bogus}\treason:parse_error"
    )
    assert summary.archives_failed == 1


def test_pipeline_reports_filename_read_failures() -> None:
    """Undecodable filename lines should be reported and skipped."""
    records, diagnostics, summary = _run(
        [FilenameReadFailure(line_number=3, reason="bad bytes")],
        PipelineOptions(verbose=True),
    )

    assert records == []
    assert diagnostics == ["level:warn\tstatus:unrecoverable_error\treason:bad bytes\tline:3"]
    assert summary.filename_errors == 1


def test_pipeline_is_silent_without_verbose(make_zip, tmp_path: Path) -> None:
    """Skips should produce no diagnostics unless verbose is set."""
    archive = make_zip("a.zip", [("a.txt", b"x" * 100)])
    items = [ArchiveTask(str(tmp_path / "missing.zip")), ArchiveTask(str(archive))]

    records, diagnostics, _ = _run(items, PipelineOptions(item_size_max=10))

    assert records == []
    assert diagnostics == []


def test_pipeline_emits_directory_entries_with_empty_body(make_zip) -> None:
    """Directory entries are archive entries and produce empty records."""
    archive = make_zip("dirs.zip", [("docs/", b""), ("docs/a.txt", b"a")])

    records, _, _ = _run([ArchiveTask(str(archive))], PipelineOptions())

    assert [(r["name"], r["content_length"], r["body"]) for r in records] == [
        ("docs/", 0, ""),
        ("docs/a.txt", 1, "YQ=="),
    ]


def test_runner_propagates_output_errors(make_zip) -> None:
    """Sink write failures should abort the run."""

    class _FailingSink(io.RawIOBase):
        def writable(self) -> bool:
            return True

        def write(self, data) -> int:
            raise OSError("disk full")

    archive = make_zip("a.zip", [("a.txt", b"a")])
    diagnostics = build_diagnostic_logger(io.StringIO(), verbose=True)
    runner = ArchivePipelineRunner(PipelineOptions(), _FailingSink(), diagnostics)

    with pytest.raises(ZipBlobsOutputError):
        runner.run([ArchiveTask(str(archive))])


def test_convert_stream_reads_filenames_and_flushes(make_zip) -> None:
    """Stream conversion should read paths line by line into a buffered sink."""
    archive = make_zip("a.zip", [("a.txt", b"hello")])
    raw_sink = io.BytesIO()
    sink = io.BufferedWriter(raw_sink)
    filenames = io.BytesIO(f"{archive}\n".encode("utf-8"))

    summary = convert_stream(filenames, sink, PipelineOptions(), io.StringIO())

    assert summary.entries_emitted == 1
    assert json.loads(raw_sink.getvalue())["name"] == "a.txt"


def test_pipeline_continues_after_unsupported_zip_version(
    make_zip, patch_central_record
) -> None:
    """An archive zipfile refuses outright should not stop later archives."""
    newer = make_zip("newer.zip", [("a.txt", b"a")])
    newer.write_bytes(patch_central_record(newer.read_bytes(), 0, 6, 110))
    sibling = make_zip("sibling.zip", [("b.txt", b"b")])

    records, diagnostics, summary = _run(
        [ArchiveTask(str(newer)), ArchiveTask(str(sibling))], PipelineOptions(verbose=True)
    )

    assert [(r["metadata"]["ZipName"], r["name"]) for r in records] == [(str(sibling), "b.txt")]
    assert diagnostics[0].startswith(
        f"level:warn\tstatus:zip_processing_failed\tpath:{newer}\treason:parse_error"
    )
    assert summary.archives_failed == 1
    assert summary.archives_converted == 1


def test_pipeline_emits_entries_with_invalid_utf8_flagged_names(make_zip) -> None:
    """Undecodable names flagged as UTF-8 should be emitted with replacement chars."""
    archive = make_zip("names.zip", [("café.txt", b"x"), ("ok.txt", b"fine")])
    archive.write_bytes(archive.read_bytes().replace("café".encode("utf-8"), b"caf\xff\xfe"))

    records, diagnostics, _ = _run([ArchiveTask(str(archive))], PipelineOptions(verbose=True))

    assert [record["name"] for record in records] == ["caf��.txt", "ok.txt"]
    assert diagnostics == []


@pytest.mark.parametrize(
    ("field_offset", "value"),
    [(10, 99), (8, 0x0001)],
    ids=["unknown-compression", "encrypted"],
)
def test_pipeline_skips_unresolvable_entries_and_keeps_siblings(
    make_zip, patch_central_record, field_offset: int, value: int
) -> None:
    """Unsupported or encrypted entries should be skipped with an entry error."""
    archive = make_zip("odd.zip", [("odd.bin", b"odd"), ("good.txt", b"fine")])
    archive.write_bytes(patch_central_record(archive.read_bytes(), 0, field_offset, value))

    records, diagnostics, summary = _run(
        [ArchiveTask(str(archive))], PipelineOptions(verbose=True)
    )

    assert [record["name"] for record in records] == ["good.txt"]
    assert len(diagnostics) == 1
    assert diagnostics[0].startswith(
        f"level:warn\tstatus:item_skipped\treason:entry_error\tpath:{archive}\titem:odd.bin"
    )
    assert summary.entries_skipped == 1
    assert summary.entries_emitted == 1

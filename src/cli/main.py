"""zipblobs CLI entry points.
This module reads zip filenames from stdin and writes JSON blobs to stdout.
It maps argparse options onto pipeline options.
"""

from __future__ import annotations

import argparse
import sys
from typing import Callable, Sequence

from core.config import ZipBlobsConfig, parse_byte_ceiling
from core.constants import SUPPORTED_LOG_LEVELS
from core.errors import ZipBlobsConfigError, ZipBlobsOutputError
from core.logging_config import configure_logging
from core.types import PipelineOptions
from ingest.pipeline import convert_stdin_to_stdout


def build_parser(config: ZipBlobsConfig) -> argparse.ArgumentParser:
    """Build the CLI parser with defaults taken from config.

    Args:
        config: Environment-derived defaults.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="rawzips2blobs2jsons",
        description="Converts zip archives into a stream of JSON blobs.",
        epilog=(
            "Reads zip filenames from stdin (one per line), and for each file inside "
            "the zips, outputs a JSON blob. The blob contains metadata and "
            "base64-encoded content."
        ),
    )
    parser.add_argument(
        "--zip-size-max",
        type=_byte_count("--zip-size-max"),
        default=config.zip_size_max,
        help="Max size in bytes for each zip file (skipped if exceeded).",
    )
    parser.add_argument(
        "--item-size-max",
        type=_byte_count("--item-size-max"),
        default=config.item_size_max,
        help="Max size in bytes for a file within a zip (skipped if exceeded).",
    )
    parser.add_argument(
        "--item-content-type",
        default=config.content_type,
        help="Default Content-Type for zip entries.",
    )
    parser.add_argument(
        "--item-content-encoding",
        default=config.content_encoding,
        help="Default Content-Encoding for zip entries.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output (warnings for skipped files).",
    )
    parser.add_argument(
        "--log-level",
        default=config.log_level,
        choices=SUPPORTED_LOG_LEVELS,
        help="Minimum level for JSON run logs on stderr.",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the zipblobs CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    try:
        config = ZipBlobsConfig.from_env()
    except ZipBlobsConfigError as error:
        print(f"Error: {error}", file=sys.stderr)
        return 2
    parser = build_parser(config)
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    options = PipelineOptions(
        zip_size_max=args.zip_size_max,
        item_size_max=args.item_size_max,
        content_type=args.item_content_type,
        content_encoding=args.item_content_encoding,
        verbose=args.verbose,
    )
    try:
        convert_stdin_to_stdout(options)
    except (OSError, ZipBlobsOutputError) as error:
        print(f"Error: Failed to process zip files from stdin: {error}", file=sys.stderr)
        return 1
    return 0


def _byte_count(flag: str) -> Callable[[str], int]:
    """Build an argparse type converter for byte ceilings."""

    def convert(raw_value: str) -> int:
        try:
            return parse_byte_ceiling(flag, raw_value)
        except ZipBlobsConfigError as error:
            raise argparse.ArgumentTypeError(str(error)) from error

    return convert

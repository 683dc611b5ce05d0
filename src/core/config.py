"""Runtime configuration model for zipblobs.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os

from core.constants import (
    DEFAULT_CONTENT_ENCODING,
    DEFAULT_CONTENT_TYPE,
    DEFAULT_ITEM_SIZE_MAX,
    DEFAULT_LOG_LEVEL,
    DEFAULT_ZIP_SIZE_MAX,
    SUPPORTED_LOG_LEVELS,
)
from core.errors import ZipBlobsConfigError


@dataclass(frozen=True)
class ZipBlobsConfig:
    """Validated runtime configuration.

    Attributes:
        zip_size_max: Default archive-size ceiling in bytes.
        item_size_max: Default per-entry size ceiling in bytes.
        content_type: Default content type stamped on every record.
        content_encoding: Default content encoding stamped on every record.
        log_level: Minimum level for operational JSON logs on stderr.
    """

    zip_size_max: int
    item_size_max: int
    content_type: str
    content_encoding: str
    log_level: str

    @classmethod
    def from_env(cls) -> "ZipBlobsConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            ZipBlobsConfigError: If environment values are invalid.
        """
        zip_size_max = parse_byte_ceiling(
            "ZIPBLOBS_ZIP_SIZE_MAX",
            os.getenv("ZIPBLOBS_ZIP_SIZE_MAX", str(DEFAULT_ZIP_SIZE_MAX)),
        )
        item_size_max = parse_byte_ceiling(
            "ZIPBLOBS_ITEM_SIZE_MAX",
            os.getenv("ZIPBLOBS_ITEM_SIZE_MAX", str(DEFAULT_ITEM_SIZE_MAX)),
        )
        log_level = parse_log_level(
            "ZIPBLOBS_LOG_LEVEL",
            os.getenv("ZIPBLOBS_LOG_LEVEL", DEFAULT_LOG_LEVEL),
        )
        return cls(
            zip_size_max=zip_size_max,
            item_size_max=item_size_max,
            content_type=os.getenv("ZIPBLOBS_CONTENT_TYPE", DEFAULT_CONTENT_TYPE),
            content_encoding=os.getenv("ZIPBLOBS_CONTENT_ENCODING", DEFAULT_CONTENT_ENCODING),
            log_level=log_level,
        )


def parse_byte_ceiling(setting_name: str, raw_value: str) -> int:
    """Parse a byte-count ceiling.

    Args:
        setting_name: Setting name used in error messages.
        raw_value: Raw string from environment or command line.

    Returns:
        Parsed non-negative integer.

    Raises:
        ZipBlobsConfigError: If value is not a non-negative integer.
    """
    try:
        value = int(raw_value)
    except ValueError as error:
        raise ZipBlobsConfigError(
            f"Invalid {setting_name} value: "
            f"expected integer byte count, got '{raw_value}'. "
            f"Set {setting_name} to a non-negative number of bytes."
        ) from error
    if value < 0:
        raise ZipBlobsConfigError(
            f"Invalid {setting_name} value: byte count must be >= 0, got {value}."
        )
    return value


def parse_log_level(setting_name: str, raw_value: str) -> str:
    """Parse and normalize a log level name.

    Args:
        setting_name: Setting name used in error messages.
        raw_value: Raw level name, case-insensitive.

    Returns:
        Lowercase level name.

    Raises:
        ZipBlobsConfigError: If level is not supported.
    """
    level = raw_value.strip().lower()
    if level not in SUPPORTED_LOG_LEVELS:
        raise ZipBlobsConfigError(
            f"Invalid {setting_name} value: '{raw_value}'. "
            f"Use one of {', '.join(SUPPORTED_LOG_LEVELS)}."
        )
    return level

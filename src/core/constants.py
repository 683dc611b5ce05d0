"""Core constants used across zipblobs modules.

This module centralizes ceilings, defaults, and zip format tags.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

DEFAULT_ZIP_SIZE_MAX = 1 << 20
DEFAULT_ITEM_SIZE_MAX = 1 << 17
DEFAULT_CONTENT_TYPE = "application/octet-stream"
DEFAULT_CONTENT_ENCODING = "identity"
DEFAULT_LOG_LEVEL = "warning"
SUPPORTED_LOG_LEVELS = ("debug", "info", "warning", "error", "critical")
CONTENT_TRANSFER_ENCODING = "base64"
ZIP_NAME_METADATA_KEY = "ZipName"
READ_CHUNK_SIZE = 64 * 1024
ZIP_UTF8_NAME_FLAG = 0x800
ZIP_LEGACY_NAME_ENCODING = "cp437"
ZIP_LOCAL_HEADER_SIGNATURE = b"PK\x03\x04"
ZIP_CENTRAL_DIRECTORY_SIGNATURE = b"PK\x01\x02"
ZIP_END_OF_CENTRAL_DIRECTORY_SIGNATURE = b"PK\x05\x06"
ZIP_END_RECORD_SEARCH_WINDOW = 22 + 0xFFFF
EXTENDED_TIMESTAMP_EXTRA_ID = 0x5455
NTFS_EXTRA_ID = 0x000A
NTFS_TIMES_ATTRIBUTE_TAG = 0x0001
FALLBACK_DATE = (1970, 1, 1)
FALLBACK_TIME = (0, 0, 0)
DIAGNOSTIC_LEVEL_NAMES = {"warning": "warn"}

"""Structured logging configuration.

This module initializes structlog loggers for two channels. Operational
events are rendered as JSON on stderr, since stdout carries the record
stream. Per-item diagnostics use an injected logger that renders
tab-separated ``key:value`` lines onto a caller-provided stream.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, MutableMapping, TextIO

import structlog

from core.constants import DEFAULT_LOG_LEVEL, DIAGNOSTIC_LEVEL_NAMES


def configure_logging(level: str = DEFAULT_LOG_LEVEL, stream: TextIO | None = None) -> None:
    """Configure the process-wide operational logger.

    Args:
        level: Minimum level name, e.g. ``info``.
        stream: Output stream, stderr when omitted.
    """
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_level_number(level)),
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog logger with JSON output on stderr.
    """
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(name)


def build_diagnostic_logger(stream: TextIO, verbose: bool) -> Any:
    """Build the per-item diagnostic logger.

    Args:
        stream: Destination for diagnostic lines.
        verbose: When false every diagnostic event is dropped.

    Returns:
        A structlog logger rendering tab-separated ``key:value`` lines.
    """
    processors: list[Any] = [] if verbose else [_drop_event]
    processors.extend([structlog.processors.add_log_level, render_diagnostic_line])
    return structlog.wrap_logger(
        structlog.PrintLogger(file=stream),
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
        cache_logger_on_first_use=False,
    )


def render_diagnostic_line(
    logger: Any,
    method_name: str,
    event_dict: MutableMapping[str, Any],
) -> str:
    """Render a diagnostic event as one tab-separated line.

    The level comes first, then the event name as ``status``, then the
    remaining fields in the order they were passed.

    Args:
        logger: Wrapped logger (unused).
        method_name: Logging method name.
        event_dict: Event fields.

    Returns:
        Rendered line without trailing newline.
    """
    level = str(event_dict.pop("level", method_name))
    status = event_dict.pop("event", "")
    fields: dict[str, Any] = {
        "level": DIAGNOSTIC_LEVEL_NAMES.get(level, level),
        "status": status,
        **event_dict,
    }
    return "\t".join(f"{key}:{_flatten(value)}" for key, value in fields.items())


def _drop_event(logger: Any, method_name: str, event_dict: MutableMapping[str, Any]) -> Any:
    """Discard every event (quiet mode)."""
    raise structlog.DropEvent


def _flatten(value: object) -> str:
    """Render a field value on a single line without tab separators."""
    text = str(value)
    for separator in ("\r\n", "\n", "\r", "\t"):
        text = text.replace(separator, " ")
    return text


def _level_number(level: str) -> int:
    """Map a level name onto its stdlib numeric value."""
    return logging.getLevelName(level.upper())

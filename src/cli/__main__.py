"""Module entry point for ``python -m cli``: zip paths on stdin, JSON lines on stdout."""

from __future__ import annotations

from cli.main import main


if __name__ == "__main__":
    raise SystemExit(main())

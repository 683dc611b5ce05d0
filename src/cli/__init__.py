"""Command-line interface for zip to JSON-lines conversion."""

"""Archive ingestion pipeline.

This module reads archive filenames, loads archives under size ceilings,
and streams one JSON record per archive entry.
"""

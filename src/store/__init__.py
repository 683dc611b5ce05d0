"""Record serialization layer.

This module encodes blob records as JSON lines for the output sink
and parses emitted streams back into typed records.
"""

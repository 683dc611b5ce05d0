"""Entry transforms.

This module normalizes zip timestamps and builds output records
from decoded archive entries.
"""

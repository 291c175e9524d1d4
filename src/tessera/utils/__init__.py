"""Shared utilities for Tessera.

- hashing: hash_grammar for grammar fingerprints
- logger: get_logger for logging
"""

from tessera.utils.hashing import hash_grammar
from tessera.utils.logger import get_logger

__all__ = [
    "get_logger",
    "hash_grammar",
]

"""Content fingerprints for raw grammar documents.

Two documents that differ only in key order get the same fingerprint,
so a registry can tell a re-registered grammar from a changed one.

Example:
    >>> from tessera.utils.hashing import hash_grammar
    >>> hash_grammar({"scopeName": "source.x"}) == hash_grammar({"scopeName": "source.x"})
    True
"""

import hashlib
import json
from collections.abc import Mapping
from typing import Any


def canonical_json(raw: Mapping[str, Any]) -> str:
    """Serialize a document with sorted keys and no insignificant whitespace."""
    return json.dumps(raw, sort_keys=True, separators=(",", ":"), default=str)


def hash_grammar(raw: Mapping[str, Any], length: int = 16) -> str:
    """Fingerprint a raw grammar document.

    Args:
        raw: Grammar document in dict form
        length: Number of hex digits to keep

    Returns:
        Truncated SHA-256 hex digest of the canonical JSON form
    """
    digest = hashlib.sha256(canonical_json(raw).encode("utf-8")).hexdigest()
    return digest[:length]

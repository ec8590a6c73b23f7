"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Deterministic cache keys for request fingerprints.
"""

from __future__ import annotations

import hashlib
import json

from ..types import JSONValue


def cache_key(fingerprint: JSONValue) -> str:
    """
    Hash a request fingerprint into a stable hex key.

    Mapping keys are sorted before hashing, so structurally identical
    fingerprints hash identically regardless of key insertion order.
    """
    normalized = json.dumps(
        fingerprint,
        ensure_ascii=True,
        sort_keys=True,
        separators=(",", ":"),
        default=str,
    )
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()

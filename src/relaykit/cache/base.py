"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: cache/base.py.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from ..types import JSONValue


@dataclass(slots=True)
class CacheEntry:
    """One cached response row with expiration and hit bookkeeping."""

    key: str
    value: Any
    created_at_s: float
    ttl_s: float
    size_bytes: int
    hits: int = 0

    def is_expired(self, now_s: float) -> bool:
        return now_s - self.created_at_s >= self.ttl_s


@dataclass(frozen=True, slots=True)
class CacheStats:
    """Point-in-time cache counters for diagnostics."""

    entries: int
    size_bytes: int
    hits: int


class ResponseCacheBackend(Protocol):
    """Protocol implemented by cache backends used by the dispatcher."""

    backend_id: str

    async def get(self, fingerprint: JSONValue) -> Any | None: ...

    async def put(
        self, fingerprint: JSONValue, value: Any, *, ttl_s: float | None = None
    ) -> str: ...

    async def delete(self, fingerprint: JSONValue) -> None: ...

    async def clear(self) -> None: ...

    async def stats(self) -> CacheStats: ...

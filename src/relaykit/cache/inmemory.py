"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: cache/inmemory.py.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from typing import Any

from .base import CacheEntry, CacheStats, ResponseCacheBackend
from .keys import cache_key
from ..types import JSONValue

logger = logging.getLogger("relaykit.cache.inmemory")

DEFAULT_TTL_S = 3600.0
DEFAULT_MAX_BYTES = 100 * 1024 * 1024


def estimate_size(value: Any) -> int:
    """Approximate the footprint of `value` by its JSON encoding length."""
    payload = value.to_payload() if hasattr(value, "to_payload") else value
    return len(json.dumps(payload, ensure_ascii=True, default=str))


class InMemoryResponseCache(ResponseCacheBackend):
    """
    Process-local response cache with TTL expiry and a byte ceiling.

    Entries are kept in write order, so the first row is always the oldest
    write. Overwriting a key moves it to the newest position. Expired rows are
    removed lazily when read.
    """

    backend_id = "inmemory"

    def __init__(
        self,
        *,
        default_ttl_s: float = DEFAULT_TTL_S,
        max_bytes: int = DEFAULT_MAX_BYTES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if default_ttl_s <= 0:
            raise ValueError("default_ttl_s must be > 0")
        if max_bytes <= 0:
            raise ValueError("max_bytes must be > 0")
        self._default_ttl_s = default_ttl_s
        self._max_bytes = max_bytes
        self._clock = clock
        self._rows: dict[str, CacheEntry] = {}
        self._size_bytes = 0

    async def get(self, fingerprint: JSONValue) -> Any | None:
        key = cache_key(fingerprint)
        row = self._rows.get(key)
        if row is None:
            return None
        if row.is_expired(self._clock()):
            self._remove(key)
            logger.debug("Cache entry expired (key=%s)", key[:12])
            return None
        row.hits += 1
        logger.debug("Cache hit (key=%s, hits=%d)", key[:12], row.hits)
        return row.value

    async def put(
        self, fingerprint: JSONValue, value: Any, *, ttl_s: float | None = None
    ) -> str:
        key = cache_key(fingerprint)
        ttl = self._default_ttl_s if ttl_s is None else ttl_s
        if key in self._rows:
            self._remove(key)
        size = estimate_size(value)
        self._rows[key] = CacheEntry(
            key=key,
            value=value,
            created_at_s=self._clock(),
            ttl_s=ttl,
            size_bytes=size,
        )
        self._size_bytes += size
        self._evict_over_ceiling()
        logger.debug("Cached response (key=%s, ttl=%.1fs)", key[:12], ttl)
        return key

    async def delete(self, fingerprint: JSONValue) -> None:
        self._remove(cache_key(fingerprint))

    async def clear(self) -> None:
        self._rows.clear()
        self._size_bytes = 0

    async def stats(self) -> CacheStats:
        return CacheStats(
            entries=len(self._rows),
            size_bytes=self._size_bytes,
            hits=sum(row.hits for row in self._rows.values()),
        )

    def _remove(self, key: str) -> None:
        row = self._rows.pop(key, None)
        if row is not None:
            self._size_bytes -= row.size_bytes

    def _evict_over_ceiling(self) -> None:
        # The newest write is never evicted to make room for itself.
        while self._size_bytes > self._max_bytes and len(self._rows) > 1:
            oldest = next(iter(self._rows))
            self._remove(oldest)
            logger.debug("Evicted cache entry (key=%s)", oldest[:12])

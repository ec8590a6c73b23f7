"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: cache/redis.py.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from .base import CacheStats, ResponseCacheBackend
from .inmemory import DEFAULT_TTL_S
from .keys import cache_key
from ..types import ChatResponse, JSONValue

logger = logging.getLogger("relaykit.cache.redis")

_CHAT_RESPONSE = "chat_response"
_JSON = "json"


def _text(blob: Any) -> str:
    if isinstance(blob, bytes):
        return blob.decode("utf-8")
    return str(blob)


class RedisResponseCache(ResponseCacheBackend):
    """
    Redis-backed response cache for multi-process deployments.

    Expiry is delegated to Redis `SETEX`. Written keys are tracked in an
    index set so `stats()` and `clear()` stay scoped to this cache's prefix.
    The byte ceiling of the in-memory backend does not apply here; Redis
    `maxmemory` governs it instead.
    """

    backend_id = "redis"

    def __init__(
        self,
        redis_client: Any,
        *,
        prefix: str = "relaykit:cache",
        default_ttl_s: float = DEFAULT_TTL_S,
    ) -> None:
        self._redis = redis_client
        self._prefix = prefix.rstrip(":")
        self._default_ttl_s = default_ttl_s

    def _row_key(self, key: str) -> str:
        return f"{self._prefix}:{key}"

    @property
    def _index_key(self) -> str:
        return f"{self._prefix}:__index"

    @property
    def _hits_key(self) -> str:
        return f"{self._prefix}:__hits"

    async def get(self, fingerprint: JSONValue) -> Any | None:
        row_key = self._row_key(cache_key(fingerprint))
        blob = await self._redis.get(row_key)
        if blob is None:
            return None
        try:
            row = json.loads(_text(blob))
        except json.JSONDecodeError:
            logger.warning("Dropping undecodable cache row (key=%s)", row_key)
            await self._redis.delete(row_key)
            return None
        await self._redis.incr(self._hits_key)
        if row.get("kind") == _CHAT_RESPONSE and isinstance(row.get("value"), dict):
            return ChatResponse.from_payload(row["value"])
        return row.get("value")

    async def put(
        self, fingerprint: JSONValue, value: Any, *, ttl_s: float | None = None
    ) -> str:
        key = cache_key(fingerprint)
        ttl = self._default_ttl_s if ttl_s is None else ttl_s
        if isinstance(value, ChatResponse):
            envelope = {"kind": _CHAT_RESPONSE, "value": value.to_payload()}
        else:
            envelope = {"kind": _JSON, "value": value}
        row_key = self._row_key(key)
        await self._redis.setex(
            row_key,
            int(max(1, ttl)),
            json.dumps(envelope, ensure_ascii=True, default=str),
        )
        await self._redis.sadd(self._index_key, row_key)
        return key

    async def delete(self, fingerprint: JSONValue) -> None:
        row_key = self._row_key(cache_key(fingerprint))
        await self._redis.delete(row_key)
        await self._redis.srem(self._index_key, row_key)

    async def clear(self) -> None:
        members = [_text(m) for m in await self._redis.smembers(self._index_key)]
        if members:
            await self._redis.delete(*members)
        await self._redis.delete(self._index_key, self._hits_key)

    async def stats(self) -> CacheStats:
        entries = 0
        size = 0
        stale: list[str] = []
        for member in await self._redis.smembers(self._index_key):
            row_key = _text(member)
            length = await self._redis.strlen(row_key)
            if not length:
                stale.append(row_key)
                continue
            entries += 1
            size += int(length)
        if stale:
            await self._redis.srem(self._index_key, *stale)
        hits = await self._redis.get(self._hits_key)
        return CacheStats(
            entries=entries,
            size_bytes=size,
            hits=int(_text(hits)) if hits is not None else 0,
        )

"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Factory helpers for selecting cache backends from environment variables.
"""

from __future__ import annotations

import os
from typing import Any

from .base import ResponseCacheBackend
from .inmemory import DEFAULT_MAX_BYTES, DEFAULT_TTL_S, InMemoryResponseCache


def _env_first(*names: str, default: str | None = None) -> str | None:
    """Return the first non-empty environment variable in `names`."""
    for name in names:
        raw = os.getenv(name)
        if raw is None:
            continue
        value = raw.strip()
        if value:
            return value
    return default


def create_response_cache_from_env(
    *, redis_client: Any | None = None
) -> ResponseCacheBackend:
    """
    Create a response cache backend from `RELAY_CACHE_*` environment variables.

    Backends:
    - `inmemory` (default)
    - `redis`

    Redis resolution uses the provided `redis_client` when supplied, otherwise
    builds a client from `RELAY_CACHE_REDIS_URL` (or `RELAY_REDIS_URL`),
    defaulting to `redis://localhost:6379/0`.
    """
    backend = os.getenv("RELAY_CACHE_BACKEND", "inmemory").strip().lower()
    ttl_s = float(_env_first("RELAY_CACHE_TTL_S", default=str(DEFAULT_TTL_S)) or DEFAULT_TTL_S)

    if backend in ("mem", "memory", "inmemory", "in_memory"):
        max_bytes = int(
            _env_first("RELAY_CACHE_MAX_BYTES", default=str(DEFAULT_MAX_BYTES))
            or DEFAULT_MAX_BYTES
        )
        return InMemoryResponseCache(default_ttl_s=ttl_s, max_bytes=max_bytes)

    if backend in ("redis",):
        from .redis import RedisResponseCache

        prefix = _env_first("RELAY_CACHE_REDIS_PREFIX", default="relaykit:cache") or "relaykit:cache"
        client = redis_client
        if client is None:
            try:
                import redis.asyncio as redis
            except ModuleNotFoundError as exc:  # pragma: no cover
                raise RuntimeError(
                    "Redis cache backend requires `redis` to be installed."
                ) from exc

            url = _env_first(
                "RELAY_CACHE_REDIS_URL",
                "RELAY_REDIS_URL",
                default="redis://localhost:6379/0",
            )
            client = redis.Redis.from_url(url)

        return RedisResponseCache(client, prefix=prefix, default_ttl_s=ttl_s)

    raise ValueError(f"Unknown RELAY_CACHE_BACKEND: {backend}")

"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: cache/__init__.py.
"""

from .base import CacheEntry, CacheStats, ResponseCacheBackend
from .factory import create_response_cache_from_env
from .inmemory import InMemoryResponseCache
from .keys import cache_key
from .redis import RedisResponseCache

__all__ = [
    "CacheEntry",
    "CacheStats",
    "ResponseCacheBackend",
    "InMemoryResponseCache",
    "RedisResponseCache",
    "cache_key",
    "create_response_cache_from_env",
]

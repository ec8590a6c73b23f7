from __future__ import annotations

import asyncio

import pytest

from relaykit.cache import (
    InMemoryResponseCache,
    RedisResponseCache,
    cache_key,
    create_response_cache_from_env,
)
from relaykit.cache.inmemory import estimate_size
from relaykit.types import ChatResponse, DispatchRequest


def run_async(coro):
    return asyncio.run(coro)


class _Clock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _fingerprint(text: str, **kwargs) -> dict:
    return DispatchRequest.build(
        [{"role": "user", "content": text}], **kwargs
    ).fingerprint()


def test_cache_key_ignores_mapping_order():
    left = {"messages": [{"role": "user", "content": "hi"}], "temperature": 0.7}
    right = {"temperature": 0.7, "messages": [{"content": "hi", "role": "user"}]}
    assert cache_key(left) == cache_key(right)
    assert len(cache_key(left)) == 64


def test_fingerprint_changes_with_temperature_and_category():
    base = _fingerprint("hello")
    assert cache_key(base) != cache_key(_fingerprint("hello", temperature=0.2))
    assert cache_key(base) != cache_key(_fingerprint("hello", category="coding"))
    assert cache_key(base) == cache_key(_fingerprint("hello", metadata={"trace": "x"}))


def test_put_then_get_returns_value_and_counts_hits():
    async def scenario() -> None:
        cache = InMemoryResponseCache()
        fp = _fingerprint("hello")
        response = ChatResponse(text="hi there", provider="openai")

        assert await cache.get(fp) is None
        await cache.put(fp, response)
        assert await cache.get(fp) == response
        assert await cache.get(fp) == response

        stats = await cache.stats()
        assert stats.entries == 1
        assert stats.hits == 2
        assert stats.size_bytes == estimate_size(response)

    run_async(scenario())


def test_entry_expires_once_ttl_elapses():
    async def scenario() -> None:
        clock = _Clock()
        cache = InMemoryResponseCache(default_ttl_s=1.0, clock=clock)
        fp = _fingerprint("expire me")
        await cache.put(fp, ChatResponse(text="v"))

        clock.advance(0.5)
        assert await cache.get(fp) is not None

        clock.advance(0.5)
        assert await cache.get(fp) is None
        stats = await cache.stats()
        assert stats.entries == 0
        assert stats.size_bytes == 0

    run_async(scenario())


def test_explicit_ttl_overrides_default():
    async def scenario() -> None:
        clock = _Clock()
        cache = InMemoryResponseCache(default_ttl_s=3600.0, clock=clock)
        fp = _fingerprint("short")
        await cache.put(fp, ChatResponse(text="v"), ttl_s=2.0)
        clock.advance(2.5)
        assert await cache.get(fp) is None

    run_async(scenario())


def test_byte_ceiling_evicts_oldest_writes_first():
    async def scenario() -> None:
        first = ChatResponse(text="a" * 50)
        ceiling = estimate_size(first) * 2
        cache = InMemoryResponseCache(max_bytes=ceiling)

        fp_a = _fingerprint("a")
        fp_b = _fingerprint("b")
        fp_c = _fingerprint("c")
        await cache.put(fp_a, first)
        await cache.put(fp_b, ChatResponse(text="b" * 50))
        await cache.put(fp_c, ChatResponse(text="c" * 50))

        assert await cache.get(fp_a) is None
        assert await cache.get(fp_b) is not None
        assert await cache.get(fp_c) is not None
        stats = await cache.stats()
        assert stats.entries == 2
        assert stats.size_bytes <= ceiling

    run_async(scenario())


def test_overwrite_moves_key_to_newest_position():
    async def scenario() -> None:
        value = ChatResponse(text="x" * 40)
        cache = InMemoryResponseCache(max_bytes=estimate_size(value) * 2)

        fp_a = _fingerprint("a")
        fp_b = _fingerprint("b")
        await cache.put(fp_a, value)
        await cache.put(fp_b, value)
        await cache.put(fp_a, value)
        await cache.put(_fingerprint("c"), value)

        assert await cache.get(fp_b) is None
        assert await cache.get(fp_a) is not None

    run_async(scenario())


def test_oversized_single_entry_is_still_kept():
    async def scenario() -> None:
        cache = InMemoryResponseCache(max_bytes=10)
        fp = _fingerprint("big")
        await cache.put(fp, ChatResponse(text="z" * 200))
        assert await cache.get(fp) is not None

    run_async(scenario())


def test_delete_and_clear_reset_footprint():
    async def scenario() -> None:
        cache = InMemoryResponseCache()
        fp_a = _fingerprint("a")
        fp_b = _fingerprint("b")
        await cache.put(fp_a, ChatResponse(text="1"))
        await cache.put(fp_b, ChatResponse(text="2"))

        await cache.delete(fp_a)
        assert await cache.get(fp_a) is None
        assert (await cache.stats()).entries == 1

        await cache.clear()
        stats = await cache.stats()
        assert stats.entries == 0
        assert stats.size_bytes == 0

    run_async(scenario())


def test_invalid_cache_limits_raise():
    with pytest.raises(ValueError):
        InMemoryResponseCache(default_ttl_s=0)
    with pytest.raises(ValueError):
        InMemoryResponseCache(max_bytes=0)


def test_cache_factory_defaults_to_in_memory(monkeypatch):
    monkeypatch.delenv("RELAY_CACHE_BACKEND", raising=False)
    monkeypatch.setenv("RELAY_CACHE_TTL_S", "42")
    cache = create_response_cache_from_env()
    assert isinstance(cache, InMemoryResponseCache)
    assert cache._default_ttl_s == 42.0  # noqa: SLF001


def test_cache_factory_redis_with_injected_client(monkeypatch):
    monkeypatch.setenv("RELAY_CACHE_BACKEND", "redis")
    monkeypatch.setenv("RELAY_CACHE_REDIS_PREFIX", "tests:cache")
    injected = object()

    cache = create_response_cache_from_env(redis_client=injected)

    assert isinstance(cache, RedisResponseCache)
    assert cache._redis is injected  # noqa: SLF001
    assert cache._prefix == "tests:cache"  # noqa: SLF001


def test_cache_factory_invalid_backend_raises(monkeypatch):
    monkeypatch.setenv("RELAY_CACHE_BACKEND", "bad-backend")
    with pytest.raises(ValueError, match="Unknown RELAY_CACHE_BACKEND"):
        create_response_cache_from_env()

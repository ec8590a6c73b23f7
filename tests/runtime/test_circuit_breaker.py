from __future__ import annotations

import asyncio

import pytest

from relaykit.errors import CircuitOpenError
from relaykit.runtime import CircuitBreaker, CircuitBreakerGroup, CircuitBreakerPolicy


def run_async(coro):
    return asyncio.run(coro)


class _Clock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


async def _ok():
    return "ok"


async def _boom():
    raise RuntimeError("backend down")


async def _fail(breaker: CircuitBreaker, times: int) -> None:
    for _ in range(times):
        with pytest.raises(RuntimeError):
            await breaker.call(_boom)


def test_breaker_opens_after_consecutive_failures():
    async def scenario() -> None:
        breaker = CircuitBreaker(CircuitBreakerPolicy(failure_threshold=3), clock=_Clock())
        await _fail(breaker, 2)
        assert breaker.state == "closed"
        await _fail(breaker, 1)
        assert breaker.state == "open"

        calls = {"n": 0}

        async def counted():
            calls["n"] += 1
            return "ok"

        with pytest.raises(CircuitOpenError):
            await breaker.call(counted)
        assert calls["n"] == 0

    run_async(scenario())


def test_success_resets_consecutive_failure_count():
    async def scenario() -> None:
        breaker = CircuitBreaker(CircuitBreakerPolicy(failure_threshold=3), clock=_Clock())
        await _fail(breaker, 2)
        assert await breaker.call(_ok) == "ok"
        assert breaker.failure_count == 0
        await _fail(breaker, 2)
        assert breaker.state == "closed"

    run_async(scenario())


def test_half_open_closes_after_success_threshold():
    async def scenario() -> None:
        clock = _Clock()
        breaker = CircuitBreaker(
            CircuitBreakerPolicy(failure_threshold=1, reset_timeout_s=10.0, success_threshold=2),
            clock=clock,
        )
        await _fail(breaker, 1)
        assert breaker.state == "open"

        clock.now = 9.9
        with pytest.raises(CircuitOpenError):
            await breaker.call(_ok)

        clock.now = 10.0
        assert await breaker.call(_ok) == "ok"
        assert breaker.state == "half_open"
        assert await breaker.call(_ok) == "ok"
        assert breaker.state == "closed"
        assert breaker.failure_count == 0

    run_async(scenario())


def test_failed_half_open_trial_reopens_breaker():
    async def scenario() -> None:
        clock = _Clock()
        breaker = CircuitBreaker(
            CircuitBreakerPolicy(failure_threshold=1, reset_timeout_s=5.0),
            clock=clock,
        )
        await _fail(breaker, 1)
        clock.now = 5.0
        await _fail(breaker, 1)
        assert breaker.state == "open"

        clock.now = 9.0
        with pytest.raises(CircuitOpenError):
            await breaker.call(_ok)

    run_async(scenario())


def test_half_open_admits_limited_concurrent_trials():
    async def scenario() -> None:
        clock = _Clock()
        breaker = CircuitBreaker(
            CircuitBreakerPolicy(failure_threshold=1, reset_timeout_s=1.0, half_open_max_calls=1),
            clock=clock,
        )
        await _fail(breaker, 1)
        clock.now = 1.0

        gate = asyncio.Event()

        async def slow():
            await gate.wait()
            return "slow"

        trial = asyncio.create_task(breaker.call(slow))
        await asyncio.sleep(0)
        with pytest.raises(CircuitOpenError):
            await breaker.call(_ok)
        gate.set()
        assert await trial == "slow"

    run_async(scenario())


def test_breaker_group_isolates_providers():
    async def scenario() -> None:
        group = CircuitBreakerGroup(CircuitBreakerPolicy(failure_threshold=1), clock=_Clock())
        with pytest.raises(RuntimeError):
            await group.call("openai", _boom)

        assert group.get("openai").state == "open"
        assert await group.call("anthropic", _ok) == "ok"

        snap = group.snapshot()
        assert snap["openai"]["state"] == "open"
        assert snap["anthropic"]["state"] == "closed"

        group.reset()
        assert group.get("openai").state == "closed"

    run_async(scenario())

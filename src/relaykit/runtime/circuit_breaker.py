"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: runtime/circuit_breaker.py.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Literal, TypeVar

from ..errors import CircuitOpenError
from ..types import JSONObject
from .contracts import CircuitBreakerPolicy

T = TypeVar("T")

logger = logging.getLogger("relaykit.runtime.circuit_breaker")

CircuitState = Literal["closed", "open", "half_open"]


@dataclass(slots=True)
class _State:
    """Data type for breaker state."""

    state: CircuitState = "closed"
    failures: int = 0
    successes: int = 0
    last_failure_at_s: float | None = None
    half_open_calls: int = 0


class CircuitBreaker:
    """
    Breaker for one protected call site.

    State changes happen between awaits only, so a single event loop needs
    no lock around them.
    """

    def __init__(
        self,
        policy: CircuitBreakerPolicy | None = None,
        *,
        name: str = "default",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.name = name
        self.policy = policy or CircuitBreakerPolicy()
        self._clock = clock
        self._row = _State()

    @property
    def state(self) -> CircuitState:
        return self._row.state

    @property
    def failure_count(self) -> int:
        return self._row.failures

    @property
    def success_count(self) -> int:
        return self._row.successes

    def reset(self) -> None:
        self._row = _State()

    def snapshot(self) -> JSONObject:
        return {
            "name": self.name,
            "state": self._row.state,
            "failures": self._row.failures,
            "successes": self._row.successes,
            "last_failure_at_s": self._row.last_failure_at_s,
        }

    def _admit(self) -> None:
        row = self._row
        if row.state == "open":
            opened_at = row.last_failure_at_s or 0.0
            if self._clock() - opened_at < self.policy.reset_timeout_s:
                raise CircuitOpenError(
                    f"Circuit breaker is open for '{self.name}'",
                    provider_id=self.name,
                )
            row.state = "half_open"
            row.successes = 0
            row.half_open_calls = 0
            logger.info("Circuit breaker half-open (name=%s)", self.name)

        if row.state == "half_open":
            if row.half_open_calls >= self.policy.half_open_max_calls:
                raise CircuitOpenError(
                    f"Circuit breaker is half-open for '{self.name}' and a trial is in flight",
                    provider_id=self.name,
                )
            row.half_open_calls += 1

    def _on_success(self, trial: bool) -> None:
        row = self._row
        row.failures = 0
        if trial:
            row.half_open_calls = max(0, row.half_open_calls - 1)
        if row.state != "half_open":
            return
        row.successes += 1
        if row.successes >= self.policy.success_threshold:
            logger.info("Circuit breaker closed (name=%s)", self.name)
            self._row = _State()

    def _on_failure(self, trial: bool) -> None:
        row = self._row
        row.last_failure_at_s = self._clock()
        if trial:
            row.half_open_calls = max(0, row.half_open_calls - 1)
        if row.state == "half_open":
            row.state = "open"
            row.successes = 0
            logger.warning("Circuit breaker reopened after failed trial (name=%s)", self.name)
            return
        row.failures += 1
        if row.state == "closed" and row.failures >= self.policy.failure_threshold:
            row.state = "open"
            logger.warning(
                "Circuit breaker opened after %d consecutive failures (name=%s)",
                row.failures,
                self.name,
            )

    async def call(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run `operation` through the breaker, re-raising its failure."""
        self._admit()
        trial = self._row.state == "half_open"
        try:
            result = await operation()
        except asyncio.CancelledError:
            if trial:
                self._row.half_open_calls = max(0, self._row.half_open_calls - 1)
            raise
        except Exception:
            self._on_failure(trial)
            raise
        self._on_success(trial)
        return result


class CircuitBreakerGroup:
    """Lazily created breakers keyed by call site (one per provider)."""

    def __init__(
        self,
        policy: CircuitBreakerPolicy | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.policy = policy or CircuitBreakerPolicy()
        self._clock = clock
        self._rows: dict[str, CircuitBreaker] = {}

    def get(self, key: str) -> CircuitBreaker:
        breaker = self._rows.get(key)
        if breaker is None:
            breaker = CircuitBreaker(self.policy, name=key, clock=self._clock)
            self._rows[key] = breaker
        return breaker

    async def call(self, key: str, operation: Callable[[], Awaitable[T]]) -> T:
        return await self.get(key).call(operation)

    def snapshot(self) -> dict[str, JSONObject]:
        return {key: breaker.snapshot() for key, breaker in sorted(self._rows.items())}

    def reset(self) -> None:
        for breaker in self._rows.values():
            breaker.reset()

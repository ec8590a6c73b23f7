"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Relay runtime settings and explicit config loading.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from .cache.inmemory import DEFAULT_MAX_BYTES, DEFAULT_TTL_S
from .routing.preferences import DEFAULT_PINNED_PROVIDERS, RoutingTable
from .runtime.contracts import CachePolicy, CircuitBreakerPolicy, TimeoutPolicy


def _optional_float(name: str) -> float | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return float(raw)


def _csv(name: str) -> tuple[str, ...] | None:
    raw = os.getenv(name)
    if raw is None:
        return None
    return tuple(part.strip() for part in raw.split(",") if part.strip())


def _pinned_from_env() -> tuple[str, ...]:
    # An empty variable clears the pinned tier; only an unset one keeps the defaults.
    pinned = _csv("RELAY_PINNED_PROVIDERS")
    return DEFAULT_PINNED_PROVIDERS if pinned is None else pinned


@dataclass(frozen=True, slots=True)
class RelaySettings:
    """Explicit settings used by the dispatcher, cache and scheduler."""

    pinned_providers: tuple[str, ...] = DEFAULT_PINNED_PROVIDERS
    routing_table_json: str | None = None

    cache_ttl_s: float = DEFAULT_TTL_S
    cache_max_bytes: int = DEFAULT_MAX_BYTES

    retry_strategy: str = "api_call"
    breaker_failure_threshold: int = 5
    breaker_reset_timeout_s: float = 60.0
    attempt_timeout_s: float | None = None

    scheduler_concurrency: int = 4
    scheduler_poll_interval_s: float = 0.01
    default_temperature: float = 0.7

    @staticmethod
    def from_env() -> "RelaySettings":
        """Load settings from environment variables."""
        return RelaySettings(
            pinned_providers=_pinned_from_env(),
            routing_table_json=os.getenv("RELAY_ROUTING_TABLE") or None,
            cache_ttl_s=float(os.getenv("RELAY_CACHE_TTL_S", str(DEFAULT_TTL_S))),
            cache_max_bytes=int(os.getenv("RELAY_CACHE_MAX_BYTES", str(DEFAULT_MAX_BYTES))),
            retry_strategy=os.getenv("RELAY_RETRY_STRATEGY", "api_call"),
            breaker_failure_threshold=int(
                os.getenv("RELAY_BREAKER_FAILURE_THRESHOLD", "5")
            ),
            breaker_reset_timeout_s=float(
                os.getenv("RELAY_BREAKER_RESET_TIMEOUT_S", "60")
            ),
            attempt_timeout_s=_optional_float("RELAY_ATTEMPT_TIMEOUT_S"),
            scheduler_concurrency=int(os.getenv("RELAY_SCHEDULER_CONCURRENCY", "4")),
            scheduler_poll_interval_s=float(
                os.getenv("RELAY_SCHEDULER_POLL_INTERVAL_S", "0.01")
            ),
            default_temperature=float(os.getenv("RELAY_DEFAULT_TEMPERATURE", "0.7")),
        )

    def routing_table(self) -> RoutingTable:
        """Routing table from `routing_table_json`, else the pinned list over defaults."""
        if self.routing_table_json:
            return RoutingTable.from_json(self.routing_table_json)
        return RoutingTable(pinned=self.pinned_providers)

    def breaker_policy(self) -> CircuitBreakerPolicy:
        return CircuitBreakerPolicy(
            failure_threshold=self.breaker_failure_threshold,
            reset_timeout_s=self.breaker_reset_timeout_s,
        )

    def timeout_policy(self) -> TimeoutPolicy:
        return TimeoutPolicy(attempt_timeout_s=self.attempt_timeout_s)

    def cache_policy(self) -> CachePolicy:
        return CachePolicy(enabled=True, ttl_s=self.cache_ttl_s)

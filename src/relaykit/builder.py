"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: builder.py.
"""

from __future__ import annotations

from collections.abc import Iterable

from .cache.base import ResponseCacheBackend
from .cache.inmemory import InMemoryResponseCache
from .evaluation import ResponseEvaluator
from .profiles import PROFILES
from .providers.contracts import ProviderSpec
from .providers.registry import ProviderRegistry
from .routing.defaults import PinnedThenScoredRouter
from .routing.preferences import RoutingTable
from .runtime.circuit_breaker import CircuitBreakerGroup
from .runtime.contracts import CachePolicy, CircuitBreakerPolicy, TimeoutPolicy
from .runtime.dispatcher import FallbackDispatcher
from .runtime.retry import RecoveryEngine
from .scheduling.scheduler import TaskScheduler
from .settings import RelaySettings


class DispatcherBuilder:
    """Builder-first wiring for a fully configured `FallbackDispatcher`."""

    def __init__(self, settings: RelaySettings | None = None) -> None:
        self._settings = settings or RelaySettings.from_env()
        self._providers: list[ProviderSpec] = []
        self._cache: ResponseCacheBackend | None = None
        self._evaluator: ResponseEvaluator | None = None
        self._table: RoutingTable | None = None
        self._recovery: RecoveryEngine | None = None

        self._strategy: str | None = None
        self._timeout_policy: TimeoutPolicy | None = None
        self._breaker_policy: CircuitBreakerPolicy | None = None
        self._cache_policy: CachePolicy | None = None

    def settings(self, settings: RelaySettings) -> "DispatcherBuilder":
        """Replace builder settings with an explicit `RelaySettings` instance."""
        self._settings = settings
        return self

    def profile(self, name: str) -> "DispatcherBuilder":
        """Apply one named runtime profile from `relaykit.profiles.PROFILES`."""
        key = name.strip().lower()
        row = PROFILES.get(key)
        if row is None:
            raise ValueError(f"Unknown relay profile '{name}'")
        self._strategy = row["strategy"]
        self._timeout_policy = row["timeout"]
        self._breaker_policy = row["breaker"]
        self._cache_policy = row["cache"]
        return self

    def provider(self, spec: ProviderSpec) -> "DispatcherBuilder":
        self._providers.append(spec)
        return self

    def providers(self, specs: Iterable[ProviderSpec]) -> "DispatcherBuilder":
        self._providers.extend(specs)
        return self

    def with_cache(self, cache: ResponseCacheBackend) -> "DispatcherBuilder":
        self._cache = cache
        return self

    def with_evaluator(self, evaluator: ResponseEvaluator) -> "DispatcherBuilder":
        self._evaluator = evaluator
        return self

    def with_routing_table(self, table: RoutingTable) -> "DispatcherBuilder":
        self._table = table
        return self

    def with_recovery(self, recovery: RecoveryEngine) -> "DispatcherBuilder":
        self._recovery = recovery
        return self

    def build(self) -> FallbackDispatcher:
        """Create a dispatcher; explicit overrides win over profile, profile over settings."""
        settings = self._settings
        registry = ProviderRegistry()
        cache_policy = self._cache_policy or settings.cache_policy()
        cache = self._cache or InMemoryResponseCache(
            default_ttl_s=cache_policy.ttl_s,
            max_bytes=settings.cache_max_bytes,
        )
        return FallbackDispatcher(
            self._providers,
            registry=registry,
            cache=cache,
            recovery=self._recovery or RecoveryEngine(),
            breakers=CircuitBreakerGroup(self._breaker_policy or settings.breaker_policy()),
            router=PinnedThenScoredRouter(
                registry, table=self._table or settings.routing_table()
            ),
            strategy=self._strategy or settings.retry_strategy,
            cache_policy=cache_policy,
            timeout_policy=self._timeout_policy or settings.timeout_policy(),
            evaluator=self._evaluator,
            default_temperature=settings.default_temperature,
        )


def create_dispatcher(
    providers: Iterable[ProviderSpec] = (),
    *,
    settings: RelaySettings | None = None,
    profile: str | None = None,
    cache: ResponseCacheBackend | None = None,
    evaluator: ResponseEvaluator | None = None,
    routing_table: RoutingTable | None = None,
) -> FallbackDispatcher:
    """One-call wiring of a dispatcher from settings, a profile and provider specs."""
    builder = DispatcherBuilder(settings).providers(providers)
    if profile is not None:
        builder.profile(profile)
    if cache is not None:
        builder.with_cache(cache)
    if evaluator is not None:
        builder.with_evaluator(evaluator)
    if routing_table is not None:
        builder.with_routing_table(routing_table)
    return builder.build()


def create_scheduler(settings: RelaySettings | None = None) -> TaskScheduler:
    """Task scheduler sized from settings."""
    settings = settings or RelaySettings.from_env()
    return TaskScheduler(
        max_concurrency=settings.scheduler_concurrency,
        poll_interval_s=settings.scheduler_poll_interval_s,
    )

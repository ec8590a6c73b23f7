"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Fallback dispatcher chaining providers until one answers.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import asdict, dataclass, replace
from typing import Any

from ..cache.base import ResponseCacheBackend
from ..cache.inmemory import InMemoryResponseCache
from ..errors import ProviderError, RelayConfigurationError, ResponseRejectedError
from ..evaluation import ResponseEvaluator, resolve_verdict
from ..providers.contracts import ProviderSpec
from ..providers.registry import ProviderRegistry
from ..routing.base import CandidateRouter, CandidateTier
from ..routing.defaults import PinnedThenScoredRouter
from ..types import ChatResponse, DispatchRequest, JSONObject, Message, TaskCategory, Usage
from ..utils import run_sync, truncate
from .circuit_breaker import CircuitBreakerGroup
from .contracts import CachePolicy, RecoveryStrategy, TimeoutPolicy
from .retry import RecoveryEngine
from .simulation import simulate_response
from .timeouts import await_with_timeout

logger = logging.getLogger("relaykit.runtime.dispatcher")


@dataclass(frozen=True, slots=True)
class DispatchFailure:
    """One candidate failure swallowed during a dispatch."""

    provider_id: str
    tier: CandidateTier
    error_type: str
    message: str


class FallbackDispatcher:
    """
    Provider-driven dispatcher with cache, recovery and ordered fallback.

    Every collaborator is injected, so one dispatcher instance is the whole
    context for its call sites. `dispatch` never raises provider failures:
    when every candidate fails it answers with a local simulation.
    """

    def __init__(
        self,
        providers: Iterable[ProviderSpec] = (),
        *,
        registry: ProviderRegistry | None = None,
        cache: ResponseCacheBackend | None = None,
        recovery: RecoveryEngine | None = None,
        breakers: CircuitBreakerGroup | None = None,
        router: CandidateRouter | None = None,
        strategy: str | RecoveryStrategy | None = "api_call",
        cache_policy: CachePolicy | None = None,
        timeout_policy: TimeoutPolicy | None = None,
        evaluator: ResponseEvaluator | None = None,
        default_temperature: float = 0.7,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self._registry = registry or ProviderRegistry()
        self._cache_policy = cache_policy or CachePolicy()
        self._cache = cache or InMemoryResponseCache(default_ttl_s=self._cache_policy.ttl_s)
        self._recovery = recovery or RecoveryEngine()
        self._breakers = breakers or CircuitBreakerGroup()
        self._router = router or PinnedThenScoredRouter(self._registry)
        self._timeout_policy = timeout_policy or TimeoutPolicy()
        self._evaluator = evaluator
        self.default_temperature = default_temperature
        self._clock = clock
        self._providers: dict[str, ProviderSpec] = {}
        self._last_errors: list[DispatchFailure] = []

        # Resolve eagerly so an unknown strategy name fails at construction.
        if not isinstance(strategy, RecoveryStrategy):
            self._recovery.get_strategy(strategy)
        self._strategy = strategy

        for spec in providers:
            self.add_provider(spec)

    @property
    def registry(self) -> ProviderRegistry:
        return self._registry

    @property
    def cache(self) -> ResponseCacheBackend:
        return self._cache

    @property
    def breakers(self) -> CircuitBreakerGroup:
        return self._breakers

    @property
    def configured_providers(self) -> list[str]:
        """Configured provider ids in registration order."""
        return [name for name, spec in self._providers.items() if spec.configured]

    @property
    def last_errors(self) -> list[DispatchFailure]:
        """
        Candidate failures swallowed by the most recently finished dispatch.

        Concurrent dispatches each keep their own list; whichever finishes
        last is the one exposed here.
        """
        return list(self._last_errors)

    def add_provider(self, spec: ProviderSpec) -> None:
        """Register one provider; ids must be unique per dispatcher."""
        if spec.provider_id in self._providers:
            raise RelayConfigurationError(f"Provider already added: {spec.provider_id}")
        self._providers[spec.provider_id] = spec
        self._registry.register(spec.provider_id, spec.capabilities)

    async def dispatch(
        self,
        messages: Sequence[Message | Mapping[str, Any]],
        category: TaskCategory = "general",
        temperature: float | None = None,
        *,
        max_tokens: int | None = None,
        metadata: JSONObject | None = None,
    ) -> ChatResponse:
        """
        Answer one conversational request; see `dispatch_request`.

        `temperature` defaults to the dispatcher's `default_temperature`.
        """
        request = DispatchRequest.build(
            messages,
            category=category,
            temperature=self.default_temperature if temperature is None else temperature,
            max_tokens=max_tokens,
            metadata=metadata,
        )
        return await self.dispatch_request(request)

    def dispatch_sync(
        self,
        messages: Sequence[Message | Mapping[str, Any]],
        category: TaskCategory = "general",
        temperature: float | None = None,
    ) -> ChatResponse:
        """Synchronous wrapper around `dispatch`."""
        return run_sync(self.dispatch(messages, category, temperature))

    async def dispatch_request(self, request: DispatchRequest) -> ChatResponse:
        """
        Execute one request with cache lookup and ordered provider fallback.

        Candidates are tried strictly one after another. Intermediate
        failures are recorded on the registry and in `last_errors` only.
        """
        errors: list[DispatchFailure] = []
        try:
            return await self._dispatch(request, errors)
        finally:
            self._last_errors = errors

    async def _dispatch(
        self, request: DispatchRequest, errors: list[DispatchFailure]
    ) -> ChatResponse:
        fingerprint = request.fingerprint()

        cached = await self._cache_get(fingerprint)
        if cached is not None:
            return cached

        candidates = self._router.route(request, configured=self.configured_providers)
        for candidate in candidates:
            spec = self._providers[candidate.provider_id]
            started = self._clock()
            try:
                response = await self._invoke(spec, request)
            except Exception as exc:
                self._registry.record_failure(spec.provider_id)
                errors.append(
                    DispatchFailure(
                        provider_id=spec.provider_id,
                        tier=candidate.tier,
                        error_type=type(exc).__name__,
                        message=str(exc),
                    )
                )
                logger.warning(
                    "Provider %s failed, trying next: %s",
                    spec.provider_id,
                    truncate(str(exc)),
                )
                continue

            latency_ms = (self._clock() - started) * 1000.0
            response = replace(
                response,
                provider=response.provider or spec.provider_id,
                model=response.model or getattr(spec.adapter, "model", None),
                latency_ms=latency_ms,
            )
            self._registry.record_success(spec.provider_id, latency_ms, spec.cost_for(response))
            logger.info(
                "Provider %s answered (tier=%s, latency_ms=%.1f)",
                spec.provider_id,
                candidate.tier,
                latency_ms,
            )
            await self._cache_put(fingerprint, response)
            return response

        if not candidates:
            logger.warning("No providers configured; using simulation mode")
        else:
            logger.warning("All %d providers failed; using simulation mode", len(errors))
        return simulate_response(request)

    async def _invoke(self, spec: ProviderSpec, request: DispatchRequest) -> ChatResponse:
        """One logical provider call: retries inside the provider's breaker."""
        timeout_s = self._timeout_policy.attempt_timeout_s

        async def _attempt() -> ChatResponse:
            response = await await_with_timeout(
                spec.adapter.chat(request),
                timeout_s,
                provider_id=spec.provider_id,
            )
            if not isinstance(response, ChatResponse):
                raise ProviderError(
                    f"Provider returned {type(response).__name__}, expected ChatResponse",
                    provider_id=spec.provider_id,
                )
            if not isinstance(response.usage, Usage):
                response = replace(response, usage=Usage())
            return response

        async def _recovered() -> ChatResponse:
            result = await self._recovery.execute(_attempt, self._strategy)
            if not result.success:
                raise result.error or ProviderError(
                    "Provider call failed", provider_id=spec.provider_id
                )
            return result.value

        response = await self._breakers.call(spec.provider_id, _recovered)

        if self._evaluator is not None:
            verdict = await resolve_verdict(self._evaluator, request, response)
            if not verdict.approved:
                raise ResponseRejectedError(
                    f"Response rejected by {verdict.evaluator or 'evaluator'}: {verdict.rationale}",
                    provider_id=spec.provider_id,
                )
        return response

    async def _cache_get(self, fingerprint: JSONObject) -> ChatResponse | None:
        if not self._cache_policy.enabled:
            return None
        try:
            cached = await self._cache.get(fingerprint)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Cache read failed, continuing uncached: %s", truncate(str(exc)))
            return None
        if cached is not None:
            logger.debug("Dispatch served from cache")
        return cached

    async def _cache_put(self, fingerprint: JSONObject, response: ChatResponse) -> None:
        if not self._cache_policy.enabled:
            return
        try:
            await self._cache.put(fingerprint, response, ttl_s=self._cache_policy.ttl_s)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Cache write failed: %s", truncate(str(exc)))

    async def get_stats(self) -> JSONObject:
        """Diagnostics snapshot of cache, provider metrics and breakers."""
        stats = await self._cache.stats()
        providers: JSONObject = {}
        for row in self._registry.all_metrics():
            entry = row.to_dict()
            entry["recommendation"] = self._registry.recommendation(row.name)
            entry["configured"] = (
                self._providers[row.name].configured if row.name in self._providers else False
            )
            providers[row.name] = entry
        return {
            "cache": asdict(stats),
            "providers": providers,
            "breakers": self._breakers.snapshot(),
            "last_errors": [asdict(failure) for failure in self._last_errors],
        }

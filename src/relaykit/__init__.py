"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

relaykit: resilient multi-provider dispatch with caching, retries,
circuit breaking and a dependency-aware task scheduler.

Quick start::

    from relaykit import ProviderSpec, create_dispatcher

    dispatcher = create_dispatcher([ProviderSpec("openai", my_adapter)])
    response = await dispatcher.dispatch(
        [{"role": "user", "content": "Summarize this diff"}],
        category="review",
    )
"""

from __future__ import annotations

from .builder import DispatcherBuilder, create_dispatcher, create_scheduler
from .cache import (
    CacheEntry,
    CacheStats,
    InMemoryResponseCache,
    RedisResponseCache,
    ResponseCacheBackend,
    cache_key,
    create_response_cache_from_env,
)
from .errors import (
    CircuitOpenError,
    ProviderError,
    ProviderTimeoutError,
    RelayConfigurationError,
    RelayError,
    ResponseRejectedError,
    RetryableProviderError,
    StrategyNotFoundError,
)
from .evaluation import (
    AcceptAllEvaluator,
    ConsensusResult,
    ConsensusVoter,
    ResponseEvaluator,
    Verdict,
)
from .profiles import PROFILES
from .providers import (
    ProviderAdapter,
    ProviderMetrics,
    ProviderRegistry,
    ProviderSpec,
    ScoringPreferences,
)
from .routing import PinnedThenScoredRouter, RouteCandidate, RoutingTable
from .runtime import (
    BUILTIN_STRATEGIES,
    CachePolicy,
    CircuitBreaker,
    CircuitBreakerGroup,
    CircuitBreakerPolicy,
    DispatchFailure,
    FallbackDispatcher,
    RecoveryEngine,
    RecoveryResult,
    RecoveryStrategy,
    TimeoutPolicy,
    message_contains,
    simulate_response,
)
from .scheduling import Task, TaskResult, TaskScheduler
from .settings import RelaySettings
from .types import ChatResponse, DispatchRequest, Message, TaskCategory, Usage

__all__ = [
    "AcceptAllEvaluator",
    "BUILTIN_STRATEGIES",
    "CacheEntry",
    "CachePolicy",
    "CacheStats",
    "ChatResponse",
    "CircuitBreaker",
    "CircuitBreakerGroup",
    "CircuitBreakerPolicy",
    "CircuitOpenError",
    "ConsensusResult",
    "ConsensusVoter",
    "DispatchFailure",
    "DispatchRequest",
    "DispatcherBuilder",
    "FallbackDispatcher",
    "InMemoryResponseCache",
    "Message",
    "PROFILES",
    "PinnedThenScoredRouter",
    "ProviderAdapter",
    "ProviderError",
    "ProviderMetrics",
    "ProviderRegistry",
    "ProviderSpec",
    "ProviderTimeoutError",
    "RecoveryEngine",
    "RecoveryResult",
    "RecoveryStrategy",
    "RedisResponseCache",
    "RelayConfigurationError",
    "RelayError",
    "RelaySettings",
    "ResponseCacheBackend",
    "ResponseEvaluator",
    "ResponseRejectedError",
    "RetryableProviderError",
    "RouteCandidate",
    "RoutingTable",
    "ScoringPreferences",
    "StrategyNotFoundError",
    "Task",
    "TaskCategory",
    "TaskResult",
    "TaskScheduler",
    "TimeoutPolicy",
    "Usage",
    "Verdict",
    "cache_key",
    "create_dispatcher",
    "create_response_cache_from_env",
    "create_scheduler",
    "message_contains",
    "simulate_response",
]

"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Resilient execution runtime: recovery strategies, circuit breakers,
per-attempt timeouts and the fallback dispatcher that composes them.
"""

from .circuit_breaker import CircuitBreaker, CircuitBreakerGroup, CircuitState
from .contracts import (
    CachePolicy,
    CircuitBreakerPolicy,
    RecoveryStrategy,
    RetryPredicate,
    TimeoutPolicy,
)
from .dispatcher import DispatchFailure, FallbackDispatcher
from .retry import (
    BUILTIN_STRATEGIES,
    DEFAULT_STRATEGY,
    RecoveryEngine,
    RecoveryResult,
    message_contains,
)
from .simulation import SIMULATION_MODEL, simulate_response
from .timeouts import await_with_timeout

__all__ = [
    "BUILTIN_STRATEGIES",
    "DEFAULT_STRATEGY",
    "SIMULATION_MODEL",
    "CachePolicy",
    "CircuitBreaker",
    "CircuitBreakerGroup",
    "CircuitBreakerPolicy",
    "CircuitState",
    "DispatchFailure",
    "FallbackDispatcher",
    "RecoveryEngine",
    "RecoveryResult",
    "RecoveryStrategy",
    "RetryPredicate",
    "TimeoutPolicy",
    "await_with_timeout",
    "message_contains",
    "simulate_response",
]

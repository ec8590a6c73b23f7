"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Typed runtime policies for provider dispatch.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

RetryPredicate = Callable[[BaseException], bool]


def _never(error: BaseException) -> bool:
    _ = error
    return False


@dataclass(frozen=True, slots=True)
class RecoveryStrategy:
    """
    Retry semantics for one class of fallible operation.

    Attributes:
        name: Registry key for the strategy.
        max_retries: Total attempts allowed, including the first one.
        backoff_s: Base delay between attempts.
        exponential_backoff: Double the delay after every failed attempt.
        should_retry: Classifies a failure as retryable.
        jitter_s: Upper bound of the uniform random jitter added per delay.
    """

    name: str
    max_retries: int = 3
    backoff_s: float = 1.0
    exponential_backoff: bool = True
    should_retry: RetryPredicate = field(default=_never, compare=False)
    jitter_s: float = 0.1

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("RecoveryStrategy.name must be non-empty")
        if self.max_retries < 1:
            raise ValueError("RecoveryStrategy.max_retries must be >= 1")
        if self.backoff_s < 0 or self.jitter_s < 0:
            raise ValueError("RecoveryStrategy delays must be >= 0")


@dataclass(frozen=True, slots=True)
class CircuitBreakerPolicy:
    """Consecutive failure policy with half-open probes."""

    failure_threshold: int = 5
    reset_timeout_s: float = 60.0
    success_threshold: int = 2
    half_open_max_calls: int = 1


@dataclass(frozen=True, slots=True)
class TimeoutPolicy:
    """Per-attempt deadline for one adapter call. `None` disables it."""

    attempt_timeout_s: float | None = None


@dataclass(frozen=True, slots=True)
class CachePolicy:
    """Response cache controls."""

    enabled: bool = True
    ttl_s: float = 3600.0

"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: runtime/retry.py.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from ..errors import CircuitOpenError, RetryableProviderError, StrategyNotFoundError
from ..utils import backoff_delay, truncate
from .contracts import RecoveryStrategy, RetryPredicate

T = TypeVar("T")

logger = logging.getLogger("relaykit.runtime.retry")

Sleep = Callable[[float], Awaitable[Any]]


@dataclass(frozen=True, slots=True)
class RecoveryResult(Generic[T]):
    """Outcome of one operation run under a recovery strategy."""

    success: bool
    attempts: int
    error: BaseException | None = None
    value: T | None = None


def message_contains(
    *needles: str,
    case_sensitive: bool = False,
    retry_types: tuple[type[BaseException], ...] = (),
) -> RetryPredicate:
    """
    Build a predicate matching failures by message substring or type.

    Exceptions that are instances of `retry_types` always match.
    """
    wanted = needles if case_sensitive else tuple(n.lower() for n in needles)

    def _predicate(error: BaseException) -> bool:
        if retry_types and isinstance(error, retry_types):
            return True
        text = str(error) if case_sensitive else str(error).lower()
        return any(token in text for token in wanted)

    return _predicate


def _always(error: BaseException) -> bool:
    _ = error
    return True


_TRANSIENT_TYPES: tuple[type[BaseException], ...] = (
    RetryableProviderError,
    TimeoutError,
    asyncio.TimeoutError,
    ConnectionError,
)

DEFAULT_STRATEGY = RecoveryStrategy(
    name="default",
    max_retries=3,
    backoff_s=1.0,
    exponential_backoff=True,
    should_retry=message_contains(
        "econnrefused",
        "etimedout",
        "enotfound",
        "rate_limit",
        "timeout",
        retry_types=_TRANSIENT_TYPES,
    ),
)

BUILTIN_STRATEGIES: tuple[RecoveryStrategy, ...] = (
    DEFAULT_STRATEGY,
    RecoveryStrategy(
        name="api_call",
        max_retries=5,
        backoff_s=1.0,
        exponential_backoff=True,
        should_retry=message_contains(
            "rate_limit",
            "timeout",
            "econnrefused",
            retry_types=_TRANSIENT_TYPES,
        ),
    ),
    RecoveryStrategy(
        name="file_operation",
        max_retries=3,
        backoff_s=0.5,
        exponential_backoff=False,
        should_retry=message_contains("EACCES", "EAGAIN", "EBUSY", case_sensitive=True),
    ),
    RecoveryStrategy(
        name="network",
        max_retries=4,
        backoff_s=2.0,
        exponential_backoff=True,
        should_retry=_always,
    ),
)


class RecoveryEngine:
    """
    Retry-with-backoff runner over a registry of named strategies.

    Operations are zero-argument async callables. Failures never escape
    `execute`; they are reported on the returned `RecoveryResult`.
    """

    def __init__(
        self,
        strategies: Iterable[RecoveryStrategy] = BUILTIN_STRATEGIES,
        *,
        default_strategy: str = "default",
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._strategies: dict[str, RecoveryStrategy] = {}
        for strategy in strategies:
            self.register_strategy(strategy)
        if default_strategy not in self._strategies:
            self.register_strategy(DEFAULT_STRATEGY)
            default_strategy = DEFAULT_STRATEGY.name
        self._default_name = default_strategy
        self._sleep = sleep

    def register_strategy(self, strategy: RecoveryStrategy) -> None:
        """Register or replace one strategy under its name."""
        self._strategies[strategy.name] = strategy

    def get_strategy(self, name: str | None = None) -> RecoveryStrategy:
        """Resolve a strategy by name; `None` selects the default one."""
        key = self._default_name if name is None else name
        strategy = self._strategies.get(key)
        if strategy is None:
            raise StrategyNotFoundError(f"Recovery strategy not found: {key}")
        return strategy

    def list_strategies(self) -> list[str]:
        return sorted(self._strategies)

    def calculate_backoff(self, attempt: int, strategy: RecoveryStrategy) -> float:
        """Delay in seconds before the attempt following `attempt`."""
        return backoff_delay(
            attempt,
            strategy.backoff_s,
            strategy.jitter_s,
            exponential=strategy.exponential_backoff,
        )

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        strategy: str | RecoveryStrategy | None = None,
    ) -> RecoveryResult[T]:
        """Run `operation` under `strategy` and report the outcome."""
        resolved = strategy if isinstance(strategy, RecoveryStrategy) else self.get_strategy(strategy)

        last: BaseException | None = None
        for attempt in range(1, resolved.max_retries + 1):
            try:
                value = await operation()
            except asyncio.CancelledError:
                raise
            except Exception as error:
                last = error
                if isinstance(error, CircuitOpenError) or not resolved.should_retry(error):
                    logger.debug(
                        "Operation failed and is not retryable (strategy=%s): %s",
                        resolved.name,
                        truncate(str(error)),
                    )
                    return RecoveryResult(success=False, attempts=attempt, error=error)

                if attempt < resolved.max_retries:
                    delay = self.calculate_backoff(attempt, resolved)
                    logger.warning(
                        "Operation failed (attempt %d/%d, strategy=%s). Retrying in %.2fs: %s",
                        attempt,
                        resolved.max_retries,
                        resolved.name,
                        delay,
                        truncate(str(error)),
                    )
                    await self._sleep(delay)
                else:
                    logger.warning(
                        "Operation failed after %d attempts (strategy=%s): %s",
                        attempt,
                        resolved.name,
                        truncate(str(error)),
                    )
                continue

            if attempt > 1:
                logger.debug("Operation succeeded on attempt %d", attempt)
            return RecoveryResult(success=True, attempts=attempt, value=value)

        return RecoveryResult(success=False, attempts=resolved.max_retries, error=last)

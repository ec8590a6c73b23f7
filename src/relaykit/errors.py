"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Error types raised across provider dispatch and recovery.
"""

from __future__ import annotations


class RelayError(Exception):
    """Base error for relaykit runtime failures."""


class ProviderError(RelayError):
    """Raised when one provider fails to answer a request."""

    def __init__(self, message: str, *, provider_id: str | None = None) -> None:
        super().__init__(message)
        self.provider_id = provider_id


class RetryableProviderError(ProviderError):
    """Transient provider failure that may succeed on retry."""


class ProviderTimeoutError(RetryableProviderError):
    """Provider call exceeded its per-attempt deadline."""


class CircuitOpenError(ProviderError):
    """Raised without calling the provider while its breaker is open."""


class ResponseRejectedError(ProviderError):
    """Raised when a response evaluator rejects a provider answer."""


class RelayConfigurationError(RelayError):
    """Raised for invalid runtime configuration."""


class StrategyNotFoundError(RelayConfigurationError, KeyError):
    """Raised when a recovery strategy name is not registered."""

    def __str__(self) -> str:
        return RelayError.__str__(self)

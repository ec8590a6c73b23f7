"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Provider contracts for pluggable backend adapters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from ..types import ChatResponse, DispatchRequest


class ProviderAdapter(Protocol):
    """
    One request/response round trip against a concrete backend.

    Adapters own their wire protocol and credentials. They raise on failure;
    `RetryableProviderError` (or a `TimeoutError`/`ConnectionError`) marks the
    failure as transient.
    """

    async def chat(self, request: DispatchRequest) -> ChatResponse: ...


@dataclass(frozen=True, slots=True)
class ProviderSpec:
    """
    Provider entry handed in by the credential/config layer.

    `configured=False` keeps the provider known to the registry but out of
    every candidate list.
    """

    provider_id: str
    adapter: ProviderAdapter
    configured: bool = True
    capabilities: tuple[str, ...] = field(default_factory=tuple)
    cost_per_1k_tokens: float = 0.0

    def __post_init__(self) -> None:
        if not self.provider_id.strip():
            raise ValueError("ProviderSpec.provider_id must be non-empty")

    def cost_for(self, response: ChatResponse) -> float:
        """Derive the cost sample recorded for one successful response."""
        tokens = response.usage.total_tokens if response.usage is not None else None
        if not tokens or self.cost_per_1k_tokens <= 0:
            return 0.0
        return tokens / 1000.0 * self.cost_per_1k_tokens


@dataclass(frozen=True, slots=True)
class ScoringPreferences:
    """Caller hints for provider scoring."""

    speed: bool = False
    cost: bool = False
    quality: bool = False

"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: routing/defaults.py.
"""

from __future__ import annotations

from collections.abc import Sequence

from ..providers.contracts import ScoringPreferences
from ..providers.registry import ProviderRegistry
from ..types import DispatchRequest
from .base import CandidateRouter, RouteCandidate
from .preferences import RoutingTable


class PinnedThenScoredRouter(CandidateRouter):
    """
    Default router: pinned providers, then category preferences, then every
    other configured provider ranked by the registry.

    Only configured providers are returned and each appears once.
    """

    router_id = "pinned_then_scored"

    def __init__(
        self,
        registry: ProviderRegistry,
        *,
        table: RoutingTable | None = None,
        preferences: ScoringPreferences | None = None,
    ) -> None:
        self._registry = registry
        self.table = table or RoutingTable()
        self.preferences = preferences

    def route(
        self,
        request: DispatchRequest,
        *,
        configured: Sequence[str],
    ) -> list[RouteCandidate]:
        """Return the deterministic candidate order for one request."""
        available = set(configured)
        order: list[RouteCandidate] = []
        queued: set[str] = set()

        def _push(name: str, tier) -> None:
            if name in available and name not in queued:
                queued.add(name)
                order.append(RouteCandidate(provider_id=name, tier=tier))

        for name in self.table.pinned:
            _push(name, "pinned")
        for name in self.table.preferred_for(request.category):
            _push(name, "category")

        remaining = [name for name in configured if name not in queued]
        for name in self._registry.rank(remaining, request.category, self.preferences):
            _push(name, "scored")
        return order

"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: routing/__init__.py.
"""

from .base import CandidateRouter, CandidateTier, RouteCandidate
from .defaults import PinnedThenScoredRouter
from .preferences import DEFAULT_PINNED_PROVIDERS, DISPATCH_PREFERENCES, RoutingTable

__all__ = [
    "CandidateRouter",
    "CandidateTier",
    "RouteCandidate",
    "PinnedThenScoredRouter",
    "RoutingTable",
    "DEFAULT_PINNED_PROVIDERS",
    "DISPATCH_PREFERENCES",
]

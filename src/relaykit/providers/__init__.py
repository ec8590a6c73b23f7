"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: providers/__init__.py.
"""

from .contracts import ProviderAdapter, ProviderSpec, ScoringPreferences
from .registry import (
    SCORING_PREFERENCES,
    ProviderMetrics,
    ProviderRegistry,
    ProviderScore,
)

__all__ = [
    "ProviderAdapter",
    "ProviderSpec",
    "ScoringPreferences",
    "ProviderMetrics",
    "ProviderRegistry",
    "ProviderScore",
    "SCORING_PREFERENCES",
]

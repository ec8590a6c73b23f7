"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Provider registry with rolling performance metrics and candidate scoring.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping, Sequence
from dataclasses import asdict, dataclass, field

from .contracts import ScoringPreferences
from ..types import JSONObject

logger = logging.getLogger("relaykit.providers.registry")

CONFIDENCE_FLOOR = 0.1
CONFIDENCE_CEILING = 1.0
SUCCESS_CONFIDENCE_STEP = 0.05
FAILURE_CONFIDENCE_STEP = 0.1
MIN_SUCCESS_RATE = 0.5
PREFERENCE_BONUS = 0.3
RECENCY_BONUS = 0.1
RECENCY_WINDOW_S = 60.0
LATENCY_SCALE_MS = 10_000.0
COST_SCALE = 0.1

# Category -> providers that earn the preference bonus while scoring.
SCORING_PREFERENCES: dict[str, tuple[str, ...]] = {
    "coding": ("anthropic", "deepseek", "groq"),
    "planning": ("openai", "anthropic", "perplexity"),
    "research": ("perplexity", "openai"),
    "general": ("anthropic", "openai", "groq"),
    "fast": ("groq", "together"),
    "economical": ("groq", "together", "deepseek"),
}


def _clamp(value: float) -> float:
    return min(CONFIDENCE_CEILING, max(CONFIDENCE_FLOOR, value))


@dataclass(slots=True)
class ProviderMetrics:
    """Rolling performance counters for one provider."""

    name: str
    capabilities: tuple[str, ...] = field(default_factory=tuple)
    avg_latency_ms: float = 0.0
    success_rate: float = 1.0
    avg_cost: float = 0.0
    last_used_s: float = 0.0
    request_count: int = 0
    failure_count: int = 0
    confidence: float = 0.5

    def to_dict(self) -> JSONObject:
        row = asdict(self)
        row["capabilities"] = list(self.capabilities)
        return row


@dataclass(frozen=True, slots=True)
class ProviderScore:
    """Scored candidate used for ranking and diagnostics."""

    provider: str
    score: float
    recommendation: str


class ProviderRegistry:
    """
    Owns every provider's metrics for the lifetime of one dispatcher.

    Metrics move only through `record_success` and `record_failure`.
    """

    def __init__(
        self,
        *,
        category_preferences: Mapping[str, Sequence[str]] | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        table = SCORING_PREFERENCES if category_preferences is None else category_preferences
        self._preferences = {
            key.strip().lower(): tuple(value) for key, value in table.items()
        }
        self._clock = clock
        self._metrics: dict[str, ProviderMetrics] = {}

    def register(self, name: str, capabilities: Sequence[str] = ()) -> ProviderMetrics:
        """Create default metrics for `name` unless it is already known."""
        existing = self._metrics.get(name)
        if existing is not None:
            return existing
        row = ProviderMetrics(name=name, capabilities=tuple(capabilities))
        self._metrics[name] = row
        return row

    def record_success(self, name: str, latency_ms: float, cost: float = 0.0) -> None:
        row = self._metrics.get(name)
        if row is None:
            return
        row.request_count += 1
        n = row.request_count
        row.last_used_s = self._clock()
        row.avg_latency_ms = (row.avg_latency_ms * (n - 1) + latency_ms) / n
        row.avg_cost = (row.avg_cost * (n - 1) + cost) / n
        row.success_rate = (n - row.failure_count) / n
        row.confidence = _clamp(row.confidence + SUCCESS_CONFIDENCE_STEP)
        logger.debug(
            "Provider %s success recorded (avg_latency_ms=%.1f, cost=%.5f)",
            name,
            row.avg_latency_ms,
            cost,
        )

    def record_failure(self, name: str) -> None:
        row = self._metrics.get(name)
        if row is None:
            return
        row.request_count += 1
        row.failure_count += 1
        n = row.request_count
        row.success_rate = (n - row.failure_count) / n
        row.confidence = _clamp(row.confidence - FAILURE_CONFIDENCE_STEP)
        logger.warning("Provider %s failure recorded", name)

    def _qualifies(self, name: str) -> bool:
        row = self._metrics.get(name)
        if row is None:
            return False
        return row.success_rate > MIN_SUCCESS_RATE and row.confidence > CONFIDENCE_FLOOR

    def score(
        self,
        name: str,
        category: str = "general",
        preferences: ScoringPreferences | None = None,
    ) -> float:
        """Composite score for one provider; unknown providers score 0."""
        row = self._metrics.get(name)
        if row is None:
            return 0.0
        prefs = preferences or ScoringPreferences()

        value = row.success_rate * row.confidence
        if prefs.speed:
            value *= max(0.0, 1.0 - row.avg_latency_ms / LATENCY_SCALE_MS)
        if prefs.cost:
            value *= max(0.0, 1.0 - row.avg_cost / COST_SCALE)
        if prefs.quality:
            value *= row.confidence

        if name in self._preferences.get(category.strip().lower(), ()):
            value += PREFERENCE_BONUS
        if row.last_used_s and self._clock() - row.last_used_s < RECENCY_WINDOW_S:
            value += RECENCY_BONUS
        return value

    def _scored(
        self,
        candidates: Sequence[str],
        category: str,
        preferences: ScoringPreferences | None,
    ) -> list[ProviderScore]:
        rows = [
            ProviderScore(
                provider=name,
                score=self.score(name, category, preferences),
                recommendation=self.recommendation(name),
            )
            for name in candidates
            if self._qualifies(name)
        ]
        # Stable sort keeps input order among equal scores.
        rows.sort(key=lambda row: row.score, reverse=True)
        return rows

    def select_best(
        self,
        candidates: Sequence[str],
        category: str = "general",
        preferences: ScoringPreferences | None = None,
    ) -> str | None:
        """
        Pick the highest-scoring qualifying candidate.

        Falls back to the first candidate when none qualify, and returns
        `None` only for an empty candidate list.
        """
        if not candidates:
            return None
        scored = self._scored(candidates, category, preferences)
        if not scored:
            return candidates[0]
        logger.debug(
            "Provider selection for %s (top=%s, scores=%s)",
            category,
            scored[0].provider,
            [(row.provider, round(row.score, 3)) for row in scored[:3]],
        )
        return scored[0].provider

    def rank(
        self,
        candidates: Sequence[str],
        category: str = "general",
        preferences: ScoringPreferences | None = None,
    ) -> list[str]:
        """Qualifying candidates by score, then the rest in input order."""
        ordered = [row.provider for row in self._scored(candidates, category, preferences)]
        seen = set(ordered)
        ordered.extend(name for name in candidates if name not in seen)
        return ordered

    def recommendation(self, name: str) -> str:
        row = self._metrics.get(name)
        if row is None:
            return "unknown"
        if row.success_rate > 0.95:
            return "excellent"
        if row.success_rate > 0.85:
            return "good"
        if row.success_rate > 0.7:
            return "acceptable"
        return "unreliable"

    def get_metrics(self, name: str) -> ProviderMetrics | None:
        return self._metrics.get(name)

    def all_metrics(self) -> list[ProviderMetrics]:
        return list(self._metrics.values())

    def reset_metrics(self) -> None:
        """Restore every provider's counters to registration defaults."""
        for name, row in list(self._metrics.items()):
            self._metrics[name] = ProviderMetrics(name=name, capabilities=row.capabilities)

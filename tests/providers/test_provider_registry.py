from __future__ import annotations

import pytest

from relaykit.providers import ProviderRegistry, ScoringPreferences


class _Clock:
    def __init__(self) -> None:
        self.now = 10_000.0

    def __call__(self) -> float:
        return self.now


def _registry(*names: str, clock=None, preferences=None) -> ProviderRegistry:
    registry = ProviderRegistry(clock=clock or _Clock(), category_preferences=preferences)
    for name in names:
        registry.register(name)
    return registry


def test_register_creates_default_metrics_once():
    registry = _registry()
    first = registry.register("openai", ["chat"])
    again = registry.register("openai", ["other"])
    assert again is first
    assert first.success_rate == 1.0
    assert first.confidence == 0.5
    assert first.request_count == 0
    assert first.capabilities == ("chat",)


def test_record_success_updates_rolling_averages_and_confidence():
    registry = _registry("openai")
    registry.record_success("openai", 100.0, cost=0.01)
    registry.record_success("openai", 300.0, cost=0.03)

    row = registry.get_metrics("openai")
    assert row.request_count == 2
    assert row.avg_latency_ms == pytest.approx(200.0)
    assert row.avg_cost == pytest.approx(0.02)
    assert row.success_rate == 1.0
    assert row.confidence == pytest.approx(0.6)


def test_record_failure_lowers_success_rate_and_confidence():
    registry = _registry("openai")
    registry.record_success("openai", 100.0)
    registry.record_failure("openai")

    row = registry.get_metrics("openai")
    assert row.request_count == 2
    assert row.failure_count == 1
    assert row.success_rate == pytest.approx(0.5)
    assert row.confidence == pytest.approx(0.45)


def test_confidence_stays_within_bounds():
    registry = _registry("a", "b")
    for _ in range(30):
        registry.record_success("a", 10.0)
        registry.record_failure("b")
    assert registry.get_metrics("a").confidence == pytest.approx(1.0)
    assert registry.get_metrics("b").confidence == pytest.approx(0.1)


def test_unknown_provider_recorders_are_ignored():
    registry = _registry()
    registry.record_success("ghost", 10.0)
    registry.record_failure("ghost")
    assert registry.get_metrics("ghost") is None
    assert registry.score("ghost") == 0.0
    assert registry.recommendation("ghost") == "unknown"


def test_select_best_skips_unqualified_providers():
    registry = _registry("flaky", "steady", preferences={})
    registry.record_failure("flaky")
    registry.record_failure("flaky")
    assert registry.select_best(["flaky", "steady"]) == "steady"


def test_select_best_falls_back_to_first_when_none_qualify():
    registry = _registry("a", "b", preferences={})
    for name in ("a", "b"):
        registry.record_failure(name)
    assert registry.select_best(["a", "b"]) == "a"
    assert registry.select_best([]) is None


def test_category_preference_bonus_and_recency_bonus():
    clock = _Clock()
    registry = _registry("anthropic", "mystery", clock=clock)
    assert registry.score("anthropic", "coding") == pytest.approx(0.5 + 0.3)
    assert registry.score("mystery", "coding") == pytest.approx(0.5)

    registry.record_success("mystery", 10.0)
    assert registry.score("mystery", "coding") == pytest.approx(0.55 + 0.1)
    clock.now += 61.0
    assert registry.score("mystery", "coding") == pytest.approx(0.55)


def test_speed_and_cost_preferences_penalize_slow_and_expensive():
    registry = _registry("fast", "slow", preferences={})
    registry.record_success("fast", 1_000.0, cost=0.01)
    registry.record_success("slow", 9_000.0, cost=0.09)

    prefs = ScoringPreferences(speed=True, cost=True)
    assert registry.score("fast", preferences=prefs) > registry.score("slow", preferences=prefs)
    assert registry.select_best(["slow", "fast"], preferences=prefs) == "fast"


def test_rank_lists_qualifying_first_then_the_rest():
    registry = _registry("a", "b", "c", preferences={"general": ("c",)})
    registry.record_failure("a")
    assert registry.rank(["a", "b", "c"]) == ["c", "b", "a"]


def test_recommendation_bands():
    registry = _registry("p")
    assert registry.recommendation("p") == "excellent"
    for _ in range(9):
        registry.record_success("p", 1.0)
    registry.record_failure("p")
    assert registry.recommendation("p") == "good"
    registry.record_failure("p")
    registry.record_failure("p")
    assert registry.recommendation("p") == "acceptable"


def test_reset_metrics_restores_defaults():
    registry = _registry("p")
    registry.record_failure("p")
    registry.reset_metrics()
    row = registry.get_metrics("p")
    assert row.failure_count == 0
    assert row.confidence == 0.5
    assert row.to_dict()["name"] == "p"


def test_preference_bonus_ignores_category_case_and_padding():
    registry = _registry("anthropic", "mystery", preferences={" Coding ": ("mystery",)})
    assert registry.score("mystery", "coding") == pytest.approx(0.8)
    assert registry.score("mystery", " CODING") == pytest.approx(0.8)

    defaults = _registry("anthropic")
    assert defaults.score("anthropic", "Coding") == pytest.approx(0.8)

"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Static provider preference tables and their validated override model.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Providers tried first for every request, in this order.
DEFAULT_PINNED_PROVIDERS: tuple[str, ...] = ("google", "perplexity", "mistral")

# Category -> providers queued right after the pinned tier.
DISPATCH_PREFERENCES: dict[str, tuple[str, ...]] = {
    "planning": ("openrouter",),
    "coding": ("anthropic", "deepseek", "openai"),
    "review": ("openai",),
}


def _normalize_ids(values: tuple[str, ...] | list[str]) -> tuple[str, ...]:
    out: list[str] = []
    for value in values:
        name = value.strip()
        if name and name not in out:
            out.append(name)
    return tuple(out)


class RoutingTable(BaseModel):
    """
    Two-tier routing configuration: pinned providers, then per-category
    preferred providers. Provider ids are stripped and de-duplicated.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    pinned: tuple[str, ...] = DEFAULT_PINNED_PROVIDERS
    categories: dict[str, tuple[str, ...]] = Field(
        default_factory=lambda: dict(DISPATCH_PREFERENCES)
    )

    @field_validator("pinned")
    @classmethod
    def _clean_pinned(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return _normalize_ids(value)

    @field_validator("categories")
    @classmethod
    def _clean_categories(
        cls, value: dict[str, tuple[str, ...]]
    ) -> dict[str, tuple[str, ...]]:
        cleaned: dict[str, tuple[str, ...]] = {}
        for category, providers in value.items():
            key = category.strip().lower()
            if not key:
                raise ValueError("category names must be non-empty")
            cleaned[key] = _normalize_ids(providers)
        return cleaned

    @classmethod
    def from_json(cls, text: str) -> RoutingTable:
        """Parse a routing table from a JSON document."""
        return cls.model_validate_json(text)

    def preferred_for(self, category: str) -> tuple[str, ...]:
        return self.categories.get(category.strip().lower(), ())

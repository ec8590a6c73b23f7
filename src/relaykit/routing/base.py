"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: routing/base.py.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal, Protocol

from ..types import DispatchRequest

CandidateTier = Literal["pinned", "category", "scored"]


@dataclass(frozen=True, slots=True)
class RouteCandidate:
    """One provider slot in a dispatch order, tagged with why it is there."""

    provider_id: str
    tier: CandidateTier


class CandidateRouter(Protocol):
    """Protocol implemented by candidate-ordering strategies."""

    router_id: str

    def route(
        self,
        request: DispatchRequest,
        *,
        configured: Sequence[str],
    ) -> list[RouteCandidate]: ...

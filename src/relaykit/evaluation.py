"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Pluggable response evaluation and consensus voting.

The dispatcher asks its evaluator whether a provider answer is acceptable;
a rejected answer counts as that provider failing. No built-in evaluator
judges content quality: plug a real one in behind `ResponseEvaluator`.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Sequence
from dataclasses import dataclass, field
from typing import Literal, Protocol

from .types import ChatResponse, DispatchRequest

Vote = Literal["approve", "reject", "abstain"]

SUPERMAJORITY_THRESHOLD = 0.67


@dataclass(frozen=True, slots=True)
class Verdict:
    """One evaluator's judgement on one response."""

    vote: Vote
    confidence: float = 1.0
    rationale: str = ""
    evaluator: str = ""

    @property
    def approved(self) -> bool:
        return self.vote == "approve"


@dataclass(frozen=True, slots=True)
class ConsensusResult:
    """Aggregated outcome of a consensus vote."""

    decision: Literal["approved", "rejected"]
    verdicts: list[Verdict] = field(default_factory=list)
    approval_rate: float = 0.0
    confidence: float = 0.0

    @property
    def supermajority_reached(self) -> bool:
        return self.decision == "approved"


class ResponseEvaluator(Protocol):
    """Judges one response; may be sync or async."""

    name: str

    def evaluate(
        self, request: DispatchRequest, response: ChatResponse
    ) -> Verdict | Awaitable[Verdict]: ...


class AcceptAllEvaluator:
    """Default evaluator approving every response."""

    name = "accept_all"

    def evaluate(self, request: DispatchRequest, response: ChatResponse) -> Verdict:
        _ = request
        _ = response
        return Verdict(vote="approve", evaluator=self.name)


async def resolve_verdict(
    evaluator: ResponseEvaluator, request: DispatchRequest, response: ChatResponse
) -> Verdict:
    """Invoke `evaluator`, handling both sync and async signatures."""
    result = evaluator.evaluate(request, response)
    if inspect.isawaitable(result):
        result = await result
    return result


class ConsensusVoter:
    """
    Composite evaluator approving when the share of approvals among
    non-abstaining verdicts reaches `threshold`.
    """

    name = "consensus"

    def __init__(
        self,
        evaluators: Sequence[ResponseEvaluator],
        *,
        threshold: float = SUPERMAJORITY_THRESHOLD,
    ) -> None:
        if not evaluators:
            raise ValueError("ConsensusVoter requires at least one evaluator")
        if not 0.0 < threshold <= 1.0:
            raise ValueError("threshold must be in (0, 1]")
        self._evaluators = list(evaluators)
        self.threshold = threshold

    async def vote(self, request: DispatchRequest, response: ChatResponse) -> ConsensusResult:
        verdicts = [
            await resolve_verdict(evaluator, request, response)
            for evaluator in self._evaluators
        ]
        voting = [v for v in verdicts if v.vote != "abstain"]
        approvals = sum(1 for v in voting if v.approved)
        rate = approvals / len(voting) if voting else 0.0
        confidence = sum(v.confidence for v in verdicts) / len(verdicts)
        return ConsensusResult(
            decision="approved" if rate >= self.threshold else "rejected",
            verdicts=verdicts,
            approval_rate=rate,
            confidence=confidence,
        )

    async def evaluate(self, request: DispatchRequest, response: ChatResponse) -> Verdict:
        result = await self.vote(request, response)
        rationale = ", ".join(
            f"{v.evaluator or 'evaluator'}={v.vote}" for v in result.verdicts
        )
        return Verdict(
            vote="approve" if result.supermajority_reached else "reject",
            confidence=result.confidence,
            rationale=rationale,
            evaluator=self.name,
        )

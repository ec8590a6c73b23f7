"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Deterministic offline answers used when every provider is exhausted.
"""

from __future__ import annotations

from ..types import ChatResponse, DispatchRequest, Usage

SIMULATION_MODEL = "simulation-mode"

_TEMPLATES: dict[str, str] = {
    "planning": (
        "## Planning Summary\n\n"
        "Request: {excerpt}\n\n"
        "**Outline:**\n"
        "1. Clarify goals and constraints\n"
        "2. Break the work into milestones\n"
        "3. Identify risks and owners\n\n"
        "_Generated offline; no provider was reachable._"
    ),
    "coding": (
        "```python\n"
        "def execute(payload: str) -> dict:\n"
        "    # Placeholder implementation\n"
        "    return {{\"success\": True, \"input\": payload}}\n"
        "```\n\n"
        "Request: {excerpt}\n\n"
        "_Generated offline; no provider was reachable._"
    ),
    "review": (
        "## Review Notes\n\n"
        "Reviewed: {excerpt}\n\n"
        "- Validate inputs at boundaries\n"
        "- Add tests for failure paths\n"
        "- Check logging around external calls\n\n"
        "_Generated offline; no provider was reachable._"
    ),
    "research": (
        "## Research Notes\n\n"
        "Topic: {excerpt}\n\n"
        "No live sources were available. Re-run once a provider is reachable.\n\n"
        "_Generated offline; no provider was reachable._"
    ),
    "general": (
        "## Response\n\n"
        "Based on the input: \"{excerpt}\"\n\n"
        "**Next steps:**\n"
        "- Review the request details\n"
        "- Retry when a provider is available\n\n"
        "_Generated offline; no provider was reachable._"
    ),
}


def simulate_response(request: DispatchRequest, *, excerpt_chars: int = 100) -> ChatResponse:
    """Synthesize a category-specific placeholder answer for `request`."""
    template = _TEMPLATES.get(request.category.strip().lower(), _TEMPLATES["general"])
    excerpt = request.last_user_text.strip()[:excerpt_chars]
    return ChatResponse(
        text=template.format(excerpt=excerpt),
        model=SIMULATION_MODEL,
        provider=None,
        usage=Usage(),
        latency_ms=0.0,
        simulated=True,
    )

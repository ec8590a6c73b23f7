"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

This module defines provider-agnostic request and response types used by
the dispatcher, cache backends and provider adapters.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal, TypeAlias

JSONPrimitive: TypeAlias = str | int | float | bool | None
JSONValue: TypeAlias = JSONPrimitive | list["JSONValue"] | dict[str, "JSONValue"]
JSONObject: TypeAlias = dict[str, JSONValue]

Role = Literal["system", "user", "assistant"]

# Coarse task tags used to bias provider selection. Unknown tags are accepted
# and behave like "general".
TaskCategory: TypeAlias = str


@dataclass(frozen=True, slots=True)
class Message:
    """Normalized chat message payload."""

    role: Role
    content: str
    name: str | None = None


@dataclass(frozen=True, slots=True)
class Usage:
    """Token usage counters returned by provider responses."""

    input_tokens: int | None = None
    output_tokens: int | None = None
    total_tokens: int | None = None


@dataclass(frozen=True, slots=True)
class ChatResponse:
    """Normalized response payload returned by `dispatch`."""

    text: str
    model: str | None = None
    provider: str | None = None
    usage: Usage = field(default_factory=Usage)
    latency_ms: float | None = None
    simulated: bool = False

    def to_payload(self) -> JSONObject:
        """Serialize into a JSON-compatible mapping."""
        return {
            "text": self.text,
            "model": self.model,
            "provider": self.provider,
            "usage": {
                "input_tokens": self.usage.input_tokens,
                "output_tokens": self.usage.output_tokens,
                "total_tokens": self.usage.total_tokens,
            },
            "latency_ms": self.latency_ms,
            "simulated": self.simulated,
        }

    @classmethod
    def from_payload(cls, row: Mapping[str, Any]) -> ChatResponse:
        """Rebuild a response from `to_payload` output."""
        usage_row = row.get("usage") if isinstance(row.get("usage"), dict) else {}
        latency = row.get("latency_ms")
        return cls(
            text=str(row.get("text", "")),
            model=row.get("model"),
            provider=row.get("provider"),
            usage=Usage(
                input_tokens=usage_row.get("input_tokens"),
                output_tokens=usage_row.get("output_tokens"),
                total_tokens=usage_row.get("total_tokens"),
            ),
            latency_ms=float(latency) if isinstance(latency, (int, float)) else None,
            simulated=bool(row.get("simulated", False)),
        )


@dataclass(frozen=True, slots=True)
class DispatchRequest:
    """
    One conversational unit of work handed to the dispatcher.

    `metadata` travels to provider adapters but is not part of the cache
    fingerprint.
    """

    messages: tuple[Message, ...] = ()
    category: TaskCategory = "general"
    temperature: float = 0.7
    max_tokens: int | None = None
    metadata: JSONObject = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        messages: Sequence[Message | Mapping[str, Any]],
        *,
        category: TaskCategory = "general",
        temperature: float = 0.7,
        max_tokens: int | None = None,
        metadata: JSONObject | None = None,
    ) -> DispatchRequest:
        """Build a request from `Message` objects or `{role, content}` rows."""
        return cls(
            messages=tuple(_coerce_message(m) for m in messages),
            category=category,
            temperature=temperature,
            max_tokens=max_tokens,
            metadata=dict(metadata or {}),
        )

    @property
    def last_user_text(self) -> str:
        """Content of the final message, or empty string."""
        if not self.messages:
            return ""
        return self.messages[-1].content

    def fingerprint(self) -> JSONObject:
        """Return the normalized payload used as the cache key source."""
        payload: JSONObject = {
            "messages": [
                {"role": m.role, "content": m.content, "name": m.name}
                for m in self.messages
            ],
            "category": self.category,
            "temperature": self.temperature,
        }
        if self.max_tokens is not None:
            payload["max_tokens"] = self.max_tokens
        return payload


def _coerce_message(row: Message | Mapping[str, Any]) -> Message:
    if isinstance(row, Message):
        return row
    role = row.get("role")
    if role not in ("system", "user", "assistant"):
        raise ValueError(f"Unsupported message role: {role!r}")
    content = row.get("content")
    if not isinstance(content, str):
        raise ValueError("Message content must be a string")
    name = row.get("name")
    return Message(role=role, content=content, name=name if isinstance(name, str) else None)

"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: scheduling/types.py.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Literal

TaskStatus = Literal["pending", "running", "completed", "failed"]

TaskWork = Callable[[], Awaitable[Any]]


@dataclass(frozen=True, slots=True)
class Task:
    """
    One named unit of work.

    `work` is a zero-argument async callable. A task starts only once every
    id in `dependencies` has completed; higher `priority` starts first.
    """

    id: str
    name: str
    work: TaskWork
    dependencies: tuple[str, ...] = ()
    priority: int = 0

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Task id must be non-empty")
        if self.id in self.dependencies:
            raise ValueError(f"Task '{self.id}' cannot depend on itself")


@dataclass(slots=True)
class TaskResult:
    """Mutable outcome row; written only by the scheduler."""

    id: str
    name: str
    status: TaskStatus = "pending"
    value: Any = None
    error: BaseException | None = None
    started_at: float | None = None
    finished_at: float | None = None
    duration_ms: float | None = None
    blocked_by: list[str] = field(default_factory=list)

    @property
    def blocked(self) -> bool:
        """True when the task never started because a dependency did not complete."""
        return self.status == "pending" and bool(self.blocked_by)

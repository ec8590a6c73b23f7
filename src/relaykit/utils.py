"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Shared helpers for timing, backoff and sync bridges.
"""

from __future__ import annotations

import asyncio
import random
from collections.abc import Coroutine
from typing import Any, TypeVar

T = TypeVar("T")


def backoff_delay(
    attempt: int,
    base_s: float,
    jitter_s: float,
    *,
    exponential: bool = True,
) -> float:
    """
    Return the sleep before retrying after `attempt` (1-based) failed.

    Exponential growth doubles the base per attempt; jitter is uniform in
    `[0, jitter_s]` and is added in both modes.
    """
    factor = 2 ** max(0, attempt - 1) if exponential else 1
    jitter = random.uniform(0.0, jitter_s) if jitter_s > 0 else 0.0
    return max(0.0, base_s * factor + jitter)


def truncate(text: str, limit: int = 100) -> str:
    """Clip `text` to at most `limit` characters for log lines."""
    if len(text) <= limit:
        return text
    return text[:limit]


def run_sync(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine from synchronous code."""
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    coro.close()
    raise RuntimeError("run_sync() cannot be used inside a running event loop")

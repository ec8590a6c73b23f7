"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Dependency-aware task scheduler with a bounded number of concurrent tasks.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Iterable

from ..utils import truncate
from .types import Task, TaskResult

logger = logging.getLogger("relaykit.scheduling.scheduler")


class TaskScheduler:
    """
    Run a batch of tasks respecting dependencies, priority and a
    concurrency ceiling.

    A task failure never aborts the batch and `run_all` never raises for
    one; dependents of a failed task stay pending with `blocked_by` set.
    """

    def __init__(
        self,
        max_concurrency: int = 4,
        poll_interval_s: float = 0.01,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        if poll_interval_s <= 0:
            raise ValueError("poll_interval_s must be > 0")
        self.max_concurrency = max_concurrency
        self.poll_interval_s = poll_interval_s
        self._clock = clock
        self._tasks: dict[str, Task] = {}
        self._results: dict[str, TaskResult] = {}

    def add_task(self, task: Task) -> None:
        """Register one task and its pending result row."""
        if task.id in self._tasks:
            raise ValueError(f"Duplicate task id: {task.id}")
        self._tasks[task.id] = task
        self._results[task.id] = TaskResult(id=task.id, name=task.name)

    def add_tasks(self, tasks: Iterable[Task]) -> None:
        for task in tasks:
            self.add_task(task)

    def get_result(self, task_id: str) -> TaskResult | None:
        return self._results.get(task_id)

    def successful_results(self) -> list[TaskResult]:
        return [row for row in self._results.values() if row.status == "completed"]

    def failed_results(self) -> list[TaskResult]:
        return [row for row in self._results.values() if row.status == "failed"]

    def blocked_results(self) -> list[TaskResult]:
        return [row for row in self._results.values() if row.blocked]

    def total_duration_ms(self) -> float:
        """Longest single task duration; approximates batch wall time under concurrency."""
        return max((row.duration_ms or 0.0 for row in self._results.values()), default=0.0)

    def _available(self, completed: set[str]) -> list[Task]:
        ready = [
            task
            for task in self._tasks.values()
            if self._results[task.id].status == "pending"
            and all(dep in completed for dep in task.dependencies)
        ]
        # sorted() is stable, so equal priorities keep registration order.
        return sorted(ready, key=lambda task: -task.priority)

    async def _execute(self, task: Task) -> None:
        row = self._results[task.id]
        started = time.perf_counter()
        try:
            row.value = await task.work()
        except Exception as exc:
            row.status = "failed"
            row.error = exc
            logger.warning("Task %s failed: %s", task.id, truncate(str(exc)))
        else:
            row.status = "completed"
        finally:
            row.finished_at = self._clock()
            row.duration_ms = (time.perf_counter() - started) * 1000.0

    async def run_all(self) -> dict[str, TaskResult]:
        """Run every pending task and return the result map by task id."""
        completed = {tid for tid, row in self._results.items() if row.status == "completed"}
        running: dict[str, asyncio.Task[None]] = {}

        try:
            while True:
                for task in self._available(completed):
                    if len(running) >= self.max_concurrency:
                        break
                    row = self._results[task.id]
                    row.status = "running"
                    row.started_at = self._clock()
                    row.blocked_by = []
                    logger.debug("Starting task %s (priority=%d)", task.id, task.priority)
                    running[task.id] = asyncio.create_task(self._execute(task))

                if not running:
                    break

                done, _ = await asyncio.wait(
                    set(running.values()),
                    timeout=self.poll_interval_s,
                    return_when=asyncio.FIRST_COMPLETED,
                )
                for task_id, handle in list(running.items()):
                    if handle not in done:
                        continue
                    running.pop(task_id)
                    row = self._results[task_id]
                    if handle.cancelled():
                        row.status = "failed"
                        row.error = asyncio.CancelledError()
                        row.finished_at = self._clock()
                    if row.status == "completed":
                        completed.add(task_id)
        except asyncio.CancelledError:
            for handle in running.values():
                handle.cancel()
            raise

        self._mark_blocked(completed)
        return dict(self._results)

    def _mark_blocked(self, completed: set[str]) -> None:
        for task in self._tasks.values():
            row = self._results[task.id]
            if row.status != "pending":
                continue
            row.blocked_by = [dep for dep in task.dependencies if dep not in completed]
            logger.info(
                "Task %s never started; blocked by %s",
                task.id,
                ", ".join(row.blocked_by) or "nothing",
            )

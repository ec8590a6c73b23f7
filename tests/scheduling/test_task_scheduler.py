from __future__ import annotations

import asyncio

import pytest

from relaykit.scheduling import Task, TaskScheduler


def run_async(coro):
    return asyncio.run(coro)


def _value(result):
    async def work():
        await asyncio.sleep(0)
        return result

    return work


def _failing(message: str):
    async def work():
        raise RuntimeError(message)

    return work


def test_dependents_of_failed_task_stay_blocked():
    async def scenario() -> None:
        scheduler = TaskScheduler()
        scheduler.add_tasks(
            [
                Task("a", "Task A", _value("A")),
                Task("b", "Task B", _value("B"), dependencies=("a",)),
                Task("c", "Task C", _failing("c exploded"), dependencies=("a",)),
                Task("d", "Task D", _value("D"), dependencies=("c",)),
            ]
        )

        results = await scheduler.run_all()

        assert len(results) == 4
        assert results["a"].status == "completed"
        assert results["b"].status == "completed"
        assert results["b"].value == "B"
        assert results["c"].status == "failed"
        assert isinstance(results["c"].error, RuntimeError)
        assert results["d"].status == "pending"
        assert results["d"].blocked_by == ["c"]
        assert results["d"].started_at is None

        assert [r.id for r in scheduler.successful_results()] == ["a", "b"]
        assert [r.id for r in scheduler.failed_results()] == ["c"]
        assert [r.id for r in scheduler.blocked_results()] == ["d"]

    run_async(scenario())


def test_dependency_order_is_respected():
    async def scenario() -> None:
        order: list[str] = []

        def record(name: str):
            async def work():
                order.append(name)
                await asyncio.sleep(0)
                return name

            return work

        scheduler = TaskScheduler(max_concurrency=4)
        scheduler.add_task(Task("deploy", "Deploy", record("deploy"), dependencies=("build", "test")))
        scheduler.add_task(Task("test", "Test", record("test"), dependencies=("build",)))
        scheduler.add_task(Task("build", "Build", record("build")))

        await scheduler.run_all()

        assert order == ["build", "test", "deploy"]

    run_async(scenario())


def test_priority_then_registration_order_decides_start_order():
    async def scenario() -> None:
        started: list[str] = []

        def record(name: str):
            async def work():
                started.append(name)
                return name

            return work

        scheduler = TaskScheduler(max_concurrency=1)
        scheduler.add_tasks(
            [
                Task("low", "Low", record("low"), priority=0),
                Task("high", "High", record("high"), priority=5),
                Task("mid-1", "Mid 1", record("mid-1"), priority=2),
                Task("mid-2", "Mid 2", record("mid-2"), priority=2),
            ]
        )

        await scheduler.run_all()

        assert started == ["high", "mid-1", "mid-2", "low"]

    run_async(scenario())


def test_concurrency_ceiling_is_never_exceeded():
    async def scenario() -> None:
        state = {"running": 0, "peak": 0}

        async def work():
            state["running"] += 1
            state["peak"] = max(state["peak"], state["running"])
            await asyncio.sleep(0.01)
            state["running"] -= 1

        scheduler = TaskScheduler(max_concurrency=2, poll_interval_s=0.001)
        scheduler.add_tasks(Task(f"t{i}", f"Task {i}", work) for i in range(6))

        results = await scheduler.run_all()

        assert state["peak"] == 2
        assert all(r.status == "completed" for r in results.values())

    run_async(scenario())


def test_results_carry_timing():
    async def scenario() -> None:
        scheduler = TaskScheduler()
        scheduler.add_task(Task("t", "Timed", _value(1)))
        await scheduler.run_all()

        row = scheduler.get_result("t")
        assert row is not None
        assert row.started_at is not None
        assert row.finished_at is not None
        assert row.finished_at >= row.started_at
        assert row.duration_ms is not None
        assert scheduler.total_duration_ms() == row.duration_ms
        assert scheduler.get_result("missing") is None

    run_async(scenario())


def test_unknown_dependency_blocks_task():
    async def scenario() -> None:
        scheduler = TaskScheduler()
        scheduler.add_task(Task("orphan", "Orphan", _value(1), dependencies=("ghost",)))
        results = await scheduler.run_all()
        assert results["orphan"].blocked
        assert results["orphan"].blocked_by == ["ghost"]

    run_async(scenario())


def test_empty_batch_returns_empty_map():
    assert run_async(TaskScheduler().run_all()) == {}


def test_duplicate_task_id_raises():
    scheduler = TaskScheduler()
    scheduler.add_task(Task("x", "X", _value(1)))
    with pytest.raises(ValueError, match="Duplicate task id"):
        scheduler.add_task(Task("x", "X again", _value(2)))


def test_invalid_scheduler_and_task_arguments():
    with pytest.raises(ValueError):
        TaskScheduler(max_concurrency=0)
    with pytest.raises(ValueError):
        TaskScheduler(poll_interval_s=0)
    with pytest.raises(ValueError):
        Task("self", "Self", _value(1), dependencies=("self",))


@pytest.mark.asyncio
async def test_scheduler_runs_dispatch_style_work_under_pytest_asyncio():
    scheduler = TaskScheduler(max_concurrency=3)
    scheduler.add_tasks(Task(str(i), f"Call {i}", _value(i * i)) for i in range(5))
    results = await scheduler.run_all()
    assert {tid: row.value for tid, row in results.items()} == {
        "0": 0,
        "1": 1,
        "2": 4,
        "3": 9,
        "4": 16,
    }


def test_total_duration_is_longest_task_not_the_sum():
    async def scenario() -> None:
        async def nap(seconds: float):
            await asyncio.sleep(seconds)

        scheduler = TaskScheduler(max_concurrency=2, poll_interval_s=0.001)
        scheduler.add_task(Task("short", "Short", lambda: nap(0.02)))
        scheduler.add_task(Task("long", "Long", lambda: nap(0.04)))

        results = await scheduler.run_all()

        durations = [row.duration_ms for row in results.values()]
        assert scheduler.total_duration_ms() == max(durations)
        assert scheduler.total_duration_ms() < sum(durations)
        assert TaskScheduler().total_duration_ms() == 0.0

    run_async(scenario())

from __future__ import annotations

import asyncio

import pytest

from joblock.core.backend import MemoryBackend
from joblock.core.models import ExecutionState, JobOptions, LockCallbacks
from joblock.runtime import JobQueue, Worker


@pytest.mark.asyncio
async def test_three_workers_run_untimed_job_once(registry):
    runs = []

    async def slow_job():
        runs.append(1)
        await asyncio.sleep(0.05)

    registry.register("SlowJob", slow_job)
    queue = JobQueue(registry)
    for _ in range(3):
        assert await queue.enqueue("SlowJob") is True

    workers = [Worker(queue, registry, name=f"w{i}") for i in range(3)]
    outcomes = await asyncio.gather(*(worker.process() for worker in workers))

    assert len(runs) == 1
    assert [outcome.state for outcome in outcomes].count(ExecutionState.DENIED) == 2


@pytest.mark.asyncio
async def test_loner_admits_once_until_finished(registry, recorder):
    done = []
    registry.register(
        "LonelyJob",
        lambda report_id: done.append(report_id),
        options=JobOptions(loner=True),
        callbacks=LockCallbacks(on_enqueue_failed=recorder.hook("enqueue_failed")),
    )
    queue = JobQueue(registry)

    assert await queue.enqueue("LonelyJob", "r1") is True
    assert await queue.enqueue("LonelyJob", "r1") is False
    assert queue.size() == 1
    assert recorder.count("enqueue_failed") == 1
    assert await queue.enqueued_or_running("LonelyJob", "r1") is True

    outcome = await Worker(queue, registry).process()
    assert outcome.state is ExecutionState.RELEASED
    assert done == ["r1"]

    assert await queue.enqueued_or_running("LonelyJob", "r1") is False
    assert await queue.enqueue("LonelyJob", "r1") is True


@pytest.mark.asyncio
async def test_loner_refused_while_running(registry, recorder):
    queue = JobQueue(registry)
    results = {}

    async def lonely(report_id):
        results["resubmit"] = await queue.enqueue("LonelyJob", report_id)

    registry.register(
        "LonelyJob",
        lonely,
        options=JobOptions(loner=True),
        callbacks=LockCallbacks(on_enqueue_failed=recorder.hook("enqueue_failed")),
    )
    await queue.enqueue("LonelyJob", "r1")
    await Worker(queue, registry).process()

    assert results["resubmit"] is False
    assert recorder.calls["enqueue_failed"] == [("r1",)]


@pytest.mark.asyncio
async def test_worker_survives_failing_job(registry):
    def failing():
        raise RuntimeError("boom")

    registry.register("FailingFastJob", failing)
    queue = JobQueue(registry)
    await queue.enqueue("FailingFastJob")

    outcome = await Worker(queue, registry).process()

    assert isinstance(outcome.error, RuntimeError)
    assert outcome.completed is False
    assert outcome.state is ExecutionState.RELEASED


@pytest.mark.asyncio
async def test_worker_returns_none_on_empty_queue(registry):
    assert await Worker(JobQueue(registry), registry).process() is None


@pytest.mark.asyncio
async def test_worker_loop_drains_closed_queue(registry):
    done = []
    registry.register("FastJob", lambda n: done.append(n))
    queue = JobQueue(registry)
    for n in range(3):
        await queue.enqueue("FastJob", n)
    queue.close()

    worker = Worker(queue, registry, poll_interval=0.01)
    await worker.start()
    await asyncio.wait_for(worker.wait(), timeout=2)

    assert done == [0, 1, 2]
    with pytest.raises(RuntimeError):
        await queue.enqueue("FastJob", 4)


@pytest.mark.asyncio
async def test_worker_stop_interrupts_idle_loop(registry):
    worker = Worker(JobQueue(registry), registry, poll_interval=10)
    await worker.start()
    await asyncio.wait_for(worker.stop(), timeout=2)
    assert worker.should_stop() is True


@pytest.mark.asyncio
async def test_submission_retries_backend_blips(registry):
    class FlakyBackend(MemoryBackend):
        def __init__(self) -> None:
            super().__init__()
            self.failures = 1

        async def set_if_absent(self, key, value):
            if self.failures:
                self.failures -= 1
                raise ConnectionError("connection reset")
            return await super().set_if_absent(key, value)

    registry.register("Flaky", lambda: None, options=JobOptions(loner=True), backend=FlakyBackend())

    assert await JobQueue(registry, submit_attempts=2).enqueue("Flaky") is True


@pytest.mark.asyncio
async def test_submission_without_retries_propagates(registry):
    class DownBackend(MemoryBackend):
        async def exists(self, key):
            raise ConnectionError("store unavailable")

    registry.register("Down", lambda: None, options=JobOptions(loner=True), backend=DownBackend())

    with pytest.raises(ConnectionError):
        await JobQueue(registry).enqueue("Down")


@pytest.mark.asyncio
async def test_each_submission_gets_its_own_id(registry):
    registry.register("FastJob", lambda n: None)
    queue = JobQueue(registry)
    await queue.enqueue("FastJob", 1)
    await queue.enqueue("FastJob", 1)

    first, second = queue.pop(), queue.pop()
    assert first.args == second.args == (1,)
    assert first.id != second.id

from __future__ import annotations

import pytest

from joblock.core.engine import LockEngine
from joblock.core.guard import AdmissionGuard
from joblock.core.models import JobOptions, LockCallbacks
from joblock.core.wrapper import ExecutionWrapper


def _noop(*args):
    return None


def _loner(registry, recorder, name="LonelyJob", timeout=0):
    return registry.register(
        name,
        _noop,
        options=JobOptions(loner=True, lock_timeout=timeout),
        callbacks=LockCallbacks(on_enqueue_failed=recorder.hook("enqueue_failed")),
    )


@pytest.mark.asyncio
async def test_non_loner_always_admitted(registry, backend):
    guard = AdmissionGuard(registry.register("Plain", _noop))
    assert await guard.before_submit(1) is True
    assert await guard.before_submit(1) is True
    assert backend.keys() == []


@pytest.mark.asyncio
async def test_second_submission_refused_while_queued(registry, backend, recorder):
    guard = AdmissionGuard(_loner(registry, recorder))

    assert await guard.before_submit("a") is True
    assert await backend.exists("loner:lock:LonelyJob:a") is True
    assert await guard.before_submit("a") is False
    assert recorder.calls["enqueue_failed"] == [("a",)]
    assert await guard.enqueued_or_running("a") is True

    # Other identifiers are unaffected.
    assert await guard.before_submit("b") is True


@pytest.mark.asyncio
async def test_submission_refused_while_running(registry, recorder):
    job = _loner(registry, recorder)
    engine = LockEngine(job)
    guard = AdmissionGuard(job, engine=engine)

    await engine.acquire("a")
    assert await guard.before_submit("a") is False
    assert recorder.count("enqueue_failed") == 1
    assert await engine.enqueued("a") is False


@pytest.mark.asyncio
async def test_timed_loner_key_expires(registry, clock, recorder):
    guard = AdmissionGuard(_loner(registry, recorder, name="LonelyTimeoutJob", timeout=60), clock=clock)

    assert await guard.before_submit() is True
    assert await guard.before_submit() is False

    clock.advance(61)
    assert await guard.enqueued_or_running() is False
    assert await guard.before_submit() is True
    assert recorder.count("enqueue_failed") == 1


@pytest.mark.asyncio
async def test_enqueued_or_running_ignores_loner_key_for_plain_jobs(registry, backend):
    job = registry.register("PlainJob", _noop)
    await backend.set_if_absent("loner:lock:PlainJob:1", "true")
    assert await AdmissionGuard(job).enqueued_or_running(1) is False


@pytest.mark.asyncio
async def test_admission_does_not_report_execution_lock_acquired(registry, recorder):
    job = registry.register(
        "LonelyAcquired",
        _noop,
        options=JobOptions(loner=True),
        callbacks=LockCallbacks(on_lock_acquired=recorder.hook("acquired")),
    )
    engine = LockEngine(job)

    assert await AdmissionGuard(job, engine=engine).before_submit(1) is True
    assert recorder.count("acquired") == 0

    await ExecutionWrapper(job, engine=engine).around_execute(_noop, 1)
    assert recorder.calls["acquired"] == [(False, 1)]

"""Execution wrapper run around every job attempt."""

from __future__ import annotations

import inspect
from typing import Any, Callable, Optional

from joblock.core.engine import Clock, LockEngine
from joblock.core.models import (
    ExecutionOutcome,
    ExecutionState,
    JobType,
    LockStatus,
    invoke_hook,
)
from joblock.utils.logging import get_logger


class ExecutionWrapper:
    """Acquire before the body runs, release (or report expiry) afterwards."""

    def __init__(self, job: JobType, *, engine: Optional[LockEngine] = None, clock: Optional[Clock] = None) -> None:
        self.job = job
        self.engine = engine or LockEngine(job, clock=clock)
        self.logger = get_logger(f"ExecutionWrapper[{job.name}]")

    async def around_execute(
        self,
        body: Callable[[], Any],
        *args: Any,
        outcome: Optional[ExecutionOutcome] = None,
    ) -> ExecutionOutcome:
        """Run ``body`` under the job lock.

        A denied lock is a silent no-op and the returned outcome is ``DENIED``.
        Exceptions from ``body`` are re-raised once the lock is dealt with; pass
        your own ``outcome`` to inspect what happened to the lock in that case.
        """
        if outcome is None:
            outcome = ExecutionOutcome(job=self.job.name, args=args)
        outcome.state = ExecutionState.ACQUIRING
        lock = await self.engine.acquire(*args)
        outcome.lock = lock

        # The job has been dequeued; its submission slot is no longer needed.
        if self.job.loner:
            await self.engine.release_loner(*args)

        if not lock:
            outcome.state = ExecutionState.DENIED
            return outcome

        outcome.state = ExecutionState.RUNNING
        try:
            value = body()
            if inspect.isawaitable(value):
                value = await value
            outcome.result = value
            outcome.completed = True
            outcome.state = ExecutionState.COMPLETED
        except BaseException as exc:
            outcome.error = exc
            outcome.state = ExecutionState.FAILED
            raise
        finally:
            await self._finish(outcome, *args)
        return outcome

    async def _finish(self, outcome: ExecutionOutcome, *args: Any) -> None:
        lock = outcome.lock
        if lock is not None and lock.status is LockStatus.TIMED and self.engine.now() >= (lock.expiry or 0):
            # Another worker may own the key by now; leave it alone.
            self.logger.warning(
                "Lock for %s%s expired at %s before the job finished", self.job.name, args, lock.expiry
            )
            outcome.state = ExecutionState.EXPIRED_NOT_RELEASED
            await invoke_hook(self.job.callbacks.on_lock_expired_before_release, *args)
            return
        await self.engine.release(*args)
        outcome.state = ExecutionState.RELEASED

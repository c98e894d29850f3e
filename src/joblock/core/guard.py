"""Admission guard for loner jobs.

A loner job may have at most one instance queued or running per identifier.
The guard runs at submission time: it refuses the job while the execution
lock is held, and otherwise claims the loner key, which the execution wrapper
clears as soon as the job is picked up.
"""

from __future__ import annotations

from typing import Any, Optional

from joblock.core.engine import Clock, LockEngine
from joblock.core.models import JobType, invoke_hook
from joblock.utils.logging import get_logger


class AdmissionGuard:
    def __init__(self, job: JobType, *, engine: Optional[LockEngine] = None, clock: Optional[Clock] = None) -> None:
        self.job = job
        self.engine = engine or LockEngine(job, clock=clock)
        self.logger = get_logger(f"AdmissionGuard[{job.name}]")

    async def enqueued_or_running(self, *args: Any) -> bool:
        if await self.engine.locked(*args):
            return True
        return self.job.loner and await self.engine.enqueued(*args)

    async def before_submit(self, *args: Any) -> bool:
        """Return whether the job may be queued."""
        if not self.job.loner:
            return True

        if await self.engine.locked(*args):
            self.logger.info("Refusing %s%s: already running", self.job.name, args)
            await invoke_hook(self.job.callbacks.on_enqueue_failed, *args)
            return False

        admitted = bool(await self.engine.acquire_loner(*args))
        if not admitted:
            self.logger.info("Refusing %s%s: already queued", self.job.name, args)
        return admitted

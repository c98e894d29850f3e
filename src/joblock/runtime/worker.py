"""Worker that runs queued jobs through the execution wrapper."""

from __future__ import annotations

import asyncio
from typing import Dict, Optional

from joblock.core.engine import Clock
from joblock.core.models import ExecutionOutcome
from joblock.core.registry import JobRegistry
from joblock.core.wrapper import ExecutionWrapper
from joblock.runtime.queue import JobQueue
from joblock.utils.logging import get_logger


class Worker:
    """Pops jobs one at a time; a failing job never takes the worker down."""

    def __init__(
        self,
        queue: JobQueue,
        registry: JobRegistry,
        *,
        name: Optional[str] = None,
        clock: Optional[Clock] = None,
        poll_interval: float = 0.5,
    ) -> None:
        self.queue = queue
        self.registry = registry
        self._name = name or self.__class__.__name__
        self._clock = clock
        self._poll_interval = poll_interval
        self._wrappers: Dict[str, ExecutionWrapper] = {}
        self._task: Optional[asyncio.Task[None]] = None
        self._stop_event = asyncio.Event()
        self.logger = get_logger(self._name)

    def _wrapper(self, name: str) -> ExecutionWrapper:
        if name not in self._wrappers:
            self._wrappers[name] = ExecutionWrapper(self.registry.get(name), clock=self._clock)
        return self._wrappers[name]

    async def process(self) -> Optional[ExecutionOutcome]:
        """Run the next queued job, if any."""
        queued = self.queue.pop()
        if queued is None:
            return None

        job = self.registry.get(queued.name)
        outcome = ExecutionOutcome(job=queued.name, args=queued.args)
        try:
            await self._wrapper(queued.name).around_execute(
                lambda: job.perform(*queued.args), *queued.args, outcome=outcome
            )
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self.logger.exception("Job %s%s (%s) failed: %s", queued.name, queued.args, queued.id, exc)
        else:
            if not outcome.ran:
                self.logger.info("Skipped %s%s: lock held by another worker", queued.name, queued.args)
        return outcome

    async def start(self) -> None:
        if self._task and not self._task.done():
            return
        self.logger.info("Starting worker %s", self._name)
        self._stop_event.clear()
        self._task = asyncio.create_task(self._run(), name=self._name)

    async def stop(self) -> None:
        self.logger.info("Stopping worker %s", self._name)
        self._stop_event.set()
        if self._task:
            await self._task
            self._task = None

    async def wait(self) -> None:
        """Wait for the loop to exit on its own, e.g. once a closed queue drains."""
        if self._task:
            await self._task
            self._task = None

    def should_stop(self) -> bool:
        return self._stop_event.is_set()

    async def _run(self) -> None:
        while not self.should_stop():
            outcome = await self.process()
            if outcome is not None:
                continue
            if self.queue.closed:
                break
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._poll_interval)
            except asyncio.TimeoutError:
                pass

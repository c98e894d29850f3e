"""Simple in-memory job queue running the admission guard on submit."""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from joblock.core.engine import Clock
from joblock.core.guard import AdmissionGuard
from joblock.core.registry import JobRegistry
from joblock.utils.logging import get_logger
from joblock.utils.retry import backend_retrying


@dataclass(slots=True)
class QueuedJob:
    name: str
    args: Tuple[Any, ...]
    id: str = field(default_factory=lambda: str(uuid.uuid4()))


class JobQueue:
    """FIFO of jobs; loner jobs are refused while an equivalent one is pending."""

    def __init__(
        self,
        registry: JobRegistry,
        *,
        clock: Optional[Clock] = None,
        submit_attempts: int = 1,
    ) -> None:
        self.registry = registry
        self._clock = clock
        self._submit_attempts = submit_attempts
        self._queue: "asyncio.Queue[QueuedJob]" = asyncio.Queue()
        self._guards: Dict[str, AdmissionGuard] = {}
        self._closed = False
        self.logger = get_logger("JobQueue")

    def _guard(self, name: str) -> AdmissionGuard:
        if name not in self._guards:
            self._guards[name] = AdmissionGuard(self.registry.get(name), clock=self._clock)
        return self._guards[name]

    async def enqueue(self, name: str, *args: Any) -> bool:
        """Submit a job; returns False when the admission guard refuses it."""
        if self._closed:
            raise RuntimeError("JobQueue is closed")

        guard = self._guard(name)
        admitted = False
        async for attempt in backend_retrying(self._submit_attempts):
            with attempt:
                admitted = await guard.before_submit(*args)
        if not admitted:
            return False

        queued = QueuedJob(name=name, args=tuple(args))
        self._queue.put_nowait(queued)
        self.logger.debug("Queued %s%s as %s", name, args, queued.id)
        return True

    async def enqueued_or_running(self, name: str, *args: Any) -> bool:
        return await self._guard(name).enqueued_or_running(*args)

    def pop(self) -> Optional[QueuedJob]:
        try:
            return self._queue.get_nowait()
        except asyncio.QueueEmpty:
            return None

    def size(self) -> int:
        return self._queue.qsize()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Stop accepting new jobs; anything already queued can still be popped."""
        self._closed = True

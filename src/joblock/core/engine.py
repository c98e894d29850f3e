"""Core lock engine: acquire, release, refresh and inspect.

Timed locks store their absolute expiry (epoch seconds) as the key's value
and follow the SETNX recovery pattern: a stale expiry may be taken over with
GETSET, and only the caller that read back a stale value wins. There is no
fencing token, so a holder still finishing just after its expiry and the
process that recovered the lock can briefly overlap.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Optional

from joblock.core import keys
from joblock.core.backend import LockBackend
from joblock.core.models import AcquireResult, Hook, JobType, LockStatus, invoke_hook
from joblock.utils.logging import get_logger

UNTIMED_MARKER = "true"

Clock = Callable[[], float]


def _parse_expiry(raw: Optional[str]) -> int:
    if raw is None:
        return 0
    try:
        return int(raw)
    except ValueError:
        return 0


class LockEngine:
    """Lock operations for one registered job type.

    The engine holds no lock state of its own; it is safe to share between
    coroutines and to run the same job type from many processes.
    """

    def __init__(self, job: JobType, *, clock: Optional[Clock] = None) -> None:
        self.job = job
        self._clock = clock or time.time
        self.logger = get_logger(f"LockEngine[{job.name}]")

    @property
    def backend(self) -> LockBackend:
        return self.job.backend

    def now(self) -> int:
        return int(self._clock())

    def lock_key(self, *args: Any) -> str:
        return keys.lock_key(self.job, *args)

    def loner_key(self, *args: Any) -> str:
        return keys.loner_key(self.job, *args)

    async def acquire(self, *args: Any) -> AcquireResult:
        """Try to take the execution lock for ``args``."""
        callbacks = self.job.callbacks
        return await self._acquire(self.lock_key(*args), callbacks.on_lock_failed, callbacks.on_lock_acquired, *args)

    async def acquire_loner(self, *args: Any) -> AcquireResult:
        """Try to take the submission (loner) lock for ``args``."""
        return await self._acquire(self.loner_key(*args), self.job.callbacks.on_enqueue_failed, None, *args)

    async def _acquire(
        self, key: str, failed_hook: Optional[Hook], acquired_hook: Optional[Hook], *args: Any
    ) -> AcquireResult:
        timeout = self.job.lock_timeout(*args)
        if timeout <= 0:
            if await self.backend.set_if_absent(key, UNTIMED_MARKER):
                result = AcquireResult(status=LockStatus.UNTIMED)
            else:
                result = AcquireResult.denied()
        else:
            result = await self._acquire_timed(key, timeout)

        if result:
            self.logger.debug("Acquired %s (%s, expiry=%s)", key, result.status.value, result.expiry)
            await invoke_hook(acquired_hook, result.recovered, *args)
        else:
            self.logger.debug("Lock %s is held elsewhere", key)
            await invoke_hook(failed_hook, *args)
        return result

    async def _acquire_timed(self, key: str, timeout: int) -> AcquireResult:
        now = self.now()
        lock_until = now + timeout

        if await self.backend.set_if_absent(key, str(lock_until)):
            return AcquireResult(status=LockStatus.TIMED, expiry=lock_until)

        # Held by someone; see whether their hold has lapsed.
        current = await self.backend.get(key)
        if current is not None and _parse_expiry(current) < now:
            previous = await self.backend.exchange(key, str(lock_until))
            if previous is None or _parse_expiry(previous) < now:
                self.logger.info("Recovered stale lock %s (expired at %s)", key, current)
                return AcquireResult(status=LockStatus.TIMED, expiry=lock_until, recovered=True)
            return AcquireResult.denied()

        # The holder may have released between SETNX and GET.
        if await self.backend.set_if_absent(key, str(lock_until)):
            return AcquireResult(status=LockStatus.TIMED, expiry=lock_until)
        return AcquireResult.denied()

    async def release(self, *args: Any) -> None:
        """Delete the execution lock without checking who holds it."""
        await self.backend.delete(self.lock_key(*args))

    async def release_loner(self, *args: Any) -> None:
        await self.backend.delete(self.loner_key(*args))

    async def refresh(self, *args: Any) -> int:
        """Push the expiry out to ``now + timeout``; returns the new expiry.

        Untimed jobs have nothing to extend, the marker is rewritten and 0 is
        returned.
        """
        timeout = self.job.lock_timeout(*args)
        key = self.lock_key(*args)
        if timeout <= 0:
            await self.backend.exchange(key, UNTIMED_MARKER)
            return 0
        lock_until = self.now() + timeout
        await self.backend.exchange(key, str(lock_until))
        self.logger.debug("Refreshed %s until %s", key, lock_until)
        return lock_until

    async def locked(self, *args: Any) -> bool:
        """True while the execution lock is held and not past its expiry."""
        return await self._inspect(self.lock_key(*args), *args)

    async def enqueued(self, *args: Any) -> bool:
        """True while a loner submission for ``args`` is pending."""
        return await self._inspect(self.loner_key(*args), *args)

    async def _inspect(self, key: str, *args: Any) -> bool:
        if self.job.lock_timeout(*args) > 0:
            return _parse_expiry(await self.backend.get(key)) > self.now()
        return await self.backend.exists(key)

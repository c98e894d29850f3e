"""CLI entrypoint: enqueue duplicate jobs and let a few workers race for them."""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from joblock.core.backend import MemoryBackend
from joblock.core.backend_redis import RedisBackend
from joblock.core.models import LockCallbacks
from joblock.core.registry import JobRegistry
from joblock.core.settings import LockSettings
from joblock.runtime import JobQueue, Worker
from joblock.utils.env import get_int_env
from joblock.utils.logging import get_logger


logger = get_logger("JoblockCLI")


async def export_report(report_id: str) -> None:
    logger.info("Exporting report %s", report_id)
    await asyncio.sleep(1)


def _callbacks() -> LockCallbacks:
    return LockCallbacks(
        on_lock_failed=lambda *args: logger.info("Lock busy for %s", args),
        on_enqueue_failed=lambda *args: logger.info("Duplicate submission refused for %s", args),
        on_lock_expired_before_release=lambda *args: logger.warning("Lock expired mid-run for %s", args),
    )


async def main() -> None:
    parser = argparse.ArgumentParser(description="Run joblock demo workers.")
    parser.add_argument("--config", type=Path, default=None, help="Path to lock settings YAML")
    parser.add_argument("--memory", action="store_true", help="Use the in-process backend instead of Redis")
    parser.add_argument("--workers", type=int, default=get_int_env("JOBLOCK_WORKERS", default=3))
    parser.add_argument("--submissions", type=int, default=3, help="How many duplicates to submit")
    parser.add_argument("--report-id", default="42")
    args = parser.parse_args()

    settings = LockSettings.from_file(args.config) if args.config else LockSettings.from_env()
    backend = MemoryBackend() if args.memory else RedisBackend.from_url(settings.redis_url)
    logger.info("Using %s backend", "memory" if args.memory else settings.redis_url)

    registry = JobRegistry(backend, settings=settings)
    registry.register("export_report", export_report, callbacks=_callbacks())

    queue = JobQueue(registry, submit_attempts=3)
    admitted = 0
    for _ in range(args.submissions):
        if await queue.enqueue("export_report", args.report_id):
            admitted += 1
    logger.info("Admitted %d of %d submissions", admitted, args.submissions)

    workers = [Worker(queue, registry, name=f"worker-{i}") for i in range(args.workers)]
    queue.close()
    try:
        for worker in workers:
            await worker.start()
        await asyncio.gather(*(worker.wait() for worker in workers))
    finally:
        if isinstance(backend, RedisBackend):
            await backend.close()


if __name__ == "__main__":
    asyncio.run(main())

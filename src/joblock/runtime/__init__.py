"""In-process reference host that drives the lock hooks."""

from .queue import JobQueue, QueuedJob
from .worker import Worker

__all__ = ["JobQueue", "QueuedJob", "Worker"]

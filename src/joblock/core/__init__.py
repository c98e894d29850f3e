"""Lock engine, admission guard and execution wrapper."""

from .backend import LockBackend, MemoryBackend
from .engine import LockEngine
from .guard import AdmissionGuard
from .keys import identifier, lock_key, loner_key
from .models import (
    AcquireResult,
    ExecutionOutcome,
    ExecutionState,
    JobOptions,
    JobType,
    KeyOverrides,
    LockCallbacks,
    LockStatus,
)
from .registry import JobRegistry
from .settings import LockSettings
from .wrapper import ExecutionWrapper

__all__ = [
    "AcquireResult",
    "AdmissionGuard",
    "ExecutionOutcome",
    "ExecutionState",
    "ExecutionWrapper",
    "JobOptions",
    "JobRegistry",
    "JobType",
    "KeyOverrides",
    "LockBackend",
    "LockCallbacks",
    "LockEngine",
    "LockSettings",
    "LockStatus",
    "MemoryBackend",
    "identifier",
    "lock_key",
    "loner_key",
]

"""Distributed job locks with loner admission control."""

from joblock.core import (
    AcquireResult,
    AdmissionGuard,
    ExecutionOutcome,
    ExecutionState,
    ExecutionWrapper,
    JobOptions,
    JobRegistry,
    JobType,
    KeyOverrides,
    LockBackend,
    LockCallbacks,
    LockEngine,
    LockSettings,
    LockStatus,
    MemoryBackend,
)

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
    "__version__",
]

__version__ = "0.1.0"

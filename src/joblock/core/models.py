"""Data models shared across the lock engine, guard and wrapper."""

from __future__ import annotations

import enum
import inspect
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from joblock.core.backend import LockBackend


Hook = Callable[..., Union[None, Awaitable[None]]]
KeyFn = Callable[..., Optional[str]]


class JobOptions(BaseModel):
    """Per-job lock configuration, fixed once the job is registered."""

    model_config = ConfigDict(frozen=True)

    # Seconds the lock may be held for; zero or below never expires.
    lock_timeout: int = 0
    loner: bool = False
    namespace: str = Field(default="lock", min_length=1)


@dataclass(frozen=True)
class LockCallbacks:
    """Optional hooks. Each may be a plain function or a coroutine function."""

    on_lock_failed: Optional[Hook] = None
    on_lock_acquired: Optional[Hook] = None
    on_lock_expired_before_release: Optional[Hook] = None
    on_enqueue_failed: Optional[Hook] = None


@dataclass(frozen=True)
class KeyOverrides:
    identifier: Optional[KeyFn] = None
    lock_key: Optional[KeyFn] = None
    loner_key: Optional[KeyFn] = None


@dataclass(frozen=True)
class JobType:
    """A registered unit of work together with its lock configuration."""

    name: str
    perform: Callable[..., Any]
    backend: LockBackend
    options: JobOptions = field(default_factory=JobOptions)
    callbacks: LockCallbacks = field(default_factory=LockCallbacks)
    keys: KeyOverrides = field(default_factory=KeyOverrides)
    timeout_fn: Optional[Callable[..., int]] = None

    def lock_timeout(self, *args: Any) -> int:
        if self.timeout_fn is not None:
            return int(self.timeout_fn(*args))
        return self.options.lock_timeout

    @property
    def loner(self) -> bool:
        return self.options.loner


class LockStatus(str, enum.Enum):
    DENIED = "denied"
    UNTIMED = "untimed"
    TIMED = "timed"


@dataclass(frozen=True)
class AcquireResult:
    """Outcome of an acquisition attempt; truthy only when the lock is held."""

    status: LockStatus
    expiry: Optional[int] = None
    recovered: bool = False

    def __bool__(self) -> bool:
        return self.status is not LockStatus.DENIED

    @classmethod
    def denied(cls) -> "AcquireResult":
        return cls(status=LockStatus.DENIED)


class ExecutionState(str, enum.Enum):
    NOT_STARTED = "not_started"
    ACQUIRING = "acquiring"
    DENIED = "denied"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    RELEASED = "released"
    EXPIRED_NOT_RELEASED = "expired_not_released"


@dataclass
class ExecutionOutcome:
    """Record of one execution attempt as seen by the host runtime."""

    job: str
    args: tuple
    state: ExecutionState = ExecutionState.NOT_STARTED
    lock: Optional[AcquireResult] = None
    completed: bool = False
    result: Any = None
    error: Optional[BaseException] = None

    @property
    def ran(self) -> bool:
        return self.state not in (ExecutionState.NOT_STARTED, ExecutionState.ACQUIRING, ExecutionState.DENIED)


async def invoke_hook(hook: Optional[Hook], *args: Any) -> None:
    """Run an optional callback, awaiting it when it returns an awaitable."""
    if hook is None:
        return
    outcome = hook(*args)
    if inspect.isawaitable(outcome):
        await outcome

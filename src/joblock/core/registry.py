"""Job registration: binds a callable to its immutable lock configuration."""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterator, Optional

from joblock.core.backend import LockBackend
from joblock.core.models import JobOptions, JobType, KeyOverrides, LockCallbacks
from joblock.core.settings import LockSettings


class JobRegistry:
    """Named job types sharing a default backend connection."""

    def __init__(self, default_backend: LockBackend, *, settings: Optional[LockSettings] = None) -> None:
        self.default_backend = default_backend
        self.settings = settings or LockSettings()
        self._jobs: Dict[str, JobType] = {}

    def register(
        self,
        name: str,
        perform: Callable[..., Any],
        *,
        options: Optional[JobOptions] = None,
        callbacks: Optional[LockCallbacks] = None,
        keys: Optional[KeyOverrides] = None,
        backend: Optional[LockBackend] = None,
        timeout_fn: Optional[Callable[..., int]] = None,
    ) -> JobType:
        if name in self._jobs:
            raise ValueError(f"Job {name!r} is already registered")
        job = JobType(
            name=name,
            perform=perform,
            backend=backend or self.default_backend,
            options=self.settings.options_for(name, options),
            callbacks=callbacks or LockCallbacks(),
            keys=keys or KeyOverrides(),
            timeout_fn=timeout_fn,
        )
        self._jobs[name] = job
        return job

    def job(self, name: Optional[str] = None, **kwargs: Any) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator form of :meth:`register`; the function name is the default job name."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self.register(name or func.__name__, func, **kwargs)
            return func

        return decorator

    def get(self, name: str) -> JobType:
        try:
            return self._jobs[name]
        except KeyError:
            raise KeyError(f"Unknown job {name!r}") from None

    def __contains__(self, name: object) -> bool:
        return name in self._jobs

    def __iter__(self) -> Iterator[JobType]:
        return iter(self._jobs.values())

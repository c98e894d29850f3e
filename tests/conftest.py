from __future__ import annotations

import pytest

from joblock.core.backend import MemoryBackend
from joblock.core.registry import JobRegistry


class FakeClock:
    """Manually advanced stand-in for ``time.time``."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class Recorder:
    """Collects callback invocations by name."""

    def __init__(self) -> None:
        self.calls: dict[str, list[tuple]] = {}

    def hook(self, name: str):
        def _record(*args):
            self.calls.setdefault(name, []).append(args)

        return _record

    def count(self, name: str) -> int:
        return len(self.calls.get(name, []))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def registry(backend: MemoryBackend) -> JobRegistry:
    return JobRegistry(backend)


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()

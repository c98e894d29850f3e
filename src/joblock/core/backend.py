"""Key-value contract the lock engine is built on."""

from __future__ import annotations

import asyncio
from typing import Dict, Optional, Protocol, runtime_checkable


@runtime_checkable
class LockBackend(Protocol):
    """Atomic single-key primitives shared by every worker.

    Each call must be atomic with respect to all other clients of the store.
    Connectivity errors are raised to the caller unchanged.
    """

    async def set_if_absent(self, key: str, value: str) -> bool: ...

    async def get(self, key: str) -> Optional[str]: ...

    async def exchange(self, key: str, value: str) -> Optional[str]: ...

    async def delete(self, key: str) -> None: ...

    async def exists(self, key: str) -> bool: ...


class MemoryBackend:
    """In-process backend; atomic for coroutines sharing the same instance."""

    def __init__(self) -> None:
        self._data: Dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def set_if_absent(self, key: str, value: str) -> bool:
        async with self._lock:
            if key in self._data:
                return False
            self._data[key] = str(value)
            return True

    async def get(self, key: str) -> Optional[str]:
        async with self._lock:
            return self._data.get(key)

    async def exchange(self, key: str, value: str) -> Optional[str]:
        async with self._lock:
            previous = self._data.get(key)
            self._data[key] = str(value)
            return previous

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._data.pop(key, None)

    async def exists(self, key: str) -> bool:
        async with self._lock:
            return key in self._data

    def keys(self) -> list[str]:
        """Snapshot of stored keys, for inspection in tests and tooling."""
        return list(self._data)

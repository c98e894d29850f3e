"""Redis implementation of the lock backend contract."""

from __future__ import annotations

import os
from typing import Optional, Union

from redis.asyncio import Redis


def _decode(value: Union[bytes, str, None]) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


class RedisBackend:
    """Maps the lock primitives onto SETNX / GET / GETSET / DEL / EXISTS."""

    def __init__(self, redis: Redis) -> None:
        self._redis = redis

    @classmethod
    def from_url(cls, url: Optional[str] = None) -> "RedisBackend":
        return cls(Redis.from_url(url or os.getenv("REDIS_URL", "redis://localhost:6379/0")))

    async def set_if_absent(self, key: str, value: str) -> bool:
        return bool(await self._redis.setnx(key, value))

    async def get(self, key: str) -> Optional[str]:
        return _decode(await self._redis.get(key))

    async def exchange(self, key: str, value: str) -> Optional[str]:
        return _decode(await self._redis.getset(key, value))

    async def delete(self, key: str) -> None:
        await self._redis.delete(key)

    async def exists(self, key: str) -> bool:
        return bool(await self._redis.exists(key))

    async def close(self) -> None:
        await self._redis.aclose()

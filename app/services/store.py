"""Access to the externally refreshed catalog blob."""

from __future__ import annotations

import logging
from typing import Mapping, Protocol

import redis.asyncio as redis_async
from redis.exceptions import RedisError

from ..errors import CatalogStoreError

logger = logging.getLogger(__name__)


class CatalogStore(Protocol):
    """Key/value source holding the raw catalog JSON."""

    async def get(self, key: str) -> str | bytes | None:
        ...

    async def ping(self) -> bool:
        ...

    async def exists(self, key: str) -> bool:
        ...


class RedisCatalogStore:
    """Reads the catalog blob from Redis."""

    def __init__(self, client: redis_async.Redis):
        self._client = client

    @classmethod
    def from_url(cls, redis_url: str) -> "RedisCatalogStore":
        pool = redis_async.ConnectionPool.from_url(
            redis_url,
            socket_timeout=10.0,
            socket_connect_timeout=5.0,
            health_check_interval=30,
            retry_on_timeout=True,
        )
        return cls(redis_async.Redis(connection_pool=pool))

    async def get(self, key: str) -> str | bytes | None:
        try:
            return await self._client.get(key)
        except RedisError as exc:
            logger.error("Redis read of %s failed: %s", key, exc)
            raise CatalogStoreError(f"Redis is not available: {exc}") from exc

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except RedisError as exc:
            logger.warning("Redis ping failed: %s", exc)
            return False

    async def exists(self, key: str) -> bool:
        try:
            return bool(await self._client.exists(key))
        except RedisError as exc:
            raise CatalogStoreError(f"Redis is not available: {exc}") from exc

    async def close(self) -> None:
        await self._client.aclose()


class MemoryCatalogStore:
    """In-process store, handy for local runs and tests."""

    def __init__(self, values: Mapping[str, str | bytes] | None = None):
        self._values: dict[str, str | bytes] = dict(values or {})

    async def get(self, key: str) -> str | bytes | None:
        return self._values.get(key)

    async def ping(self) -> bool:
        return True

    async def exists(self, key: str) -> bool:
        return key in self._values

    def put(self, key: str, value: str | bytes) -> None:
        self._values[key] = value

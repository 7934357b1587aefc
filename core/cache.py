import logging
from typing import Any, Optional, Protocol

from aiocache import SimpleMemoryCache

from core.config import settings

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Minimal store interface shared by caches and the rate limiter."""

    async def get(self, key: str) -> Any:
        ...

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        ...


class AiocacheStore:
    """In-process TTL store backed by aiocache.

    Swap for a distributed backend (e.g. aiocache.RedisCache) when the
    service runs on more than one host.
    """

    def __init__(self, namespace: Optional[str] = None):
        self._cache = SimpleMemoryCache(namespace=namespace or settings.cache["prefix"])

    async def get(self, key: str) -> Any:
        return await self._cache.get(key)

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        await self._cache.set(key, value, ttl=ttl)

    async def clear(self) -> None:
        await self._cache.clear()

"""
Read-Through Cache

Explicit cache-or-load wrapper over RedisService. Callers compose it
directly and call get_or_load()/evict(); there is no interception layer,
so every call goes through the cache.
"""

import asyncio
from collections import defaultdict
from typing import Awaitable, Callable, Dict, Generic, Optional, TypeVar

from opentelemetry import trace
from pydantic import TypeAdapter
import structlog

from ...infrastructure.redis.redis_service import RedisService

logger = structlog.get_logger()
tracer = trace.get_tracer(__name__)

T = TypeVar("T")

_MISS = object()


class ReadThroughCache(Generic[T]):
    """
    Cache-or-load over one named cache.

    Values are validated through a pydantic TypeAdapter on the way out and
    dumped in JSON mode on the way in. An empty collection is a valid cached
    value; only a missing key counts as a miss. A loader returning None is
    passed through and not cached.

    Concurrent misses for the same key inside one process are coalesced: the
    first caller loads, the others wait on a per-key lock and then read the
    freshly stored value.
    """

    def __init__(
        self,
        redis: RedisService,
        cache_name: str,
        adapter: TypeAdapter,
        ttl: Optional[int] = None,
    ):
        self.redis = redis
        self.cache_name = cache_name
        self.adapter = adapter
        self.ttl = ttl
        self._locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def _lookup(self, key: str):
        raw = await self.redis.get_json(key)
        if raw is None:
            return _MISS
        return self.adapter.validate_python(raw)

    async def get_or_load(self, key: str, loader: Callable[[], Awaitable[T]]) -> T:
        """
        Return the cached value for key, or load, store and return it.

        Args:
            key: Cache key
            loader: Coroutine factory producing the fresh value

        Returns:
            Cached or freshly loaded value
        """
        with tracer.start_as_current_span("read_through.get_or_load") as span:
            span.set_attribute("cache.name", self.cache_name)
            span.set_attribute("cache.key", key)

            cached = await self._lookup(key)
            if cached is not _MISS:
                span.set_attribute("cache.hit", True)
                logger.debug("Cache hit", cache=self.cache_name, key=key)
                return cached

            async with self._locks[key]:
                cached = await self._lookup(key)
                if cached is not _MISS:
                    span.set_attribute("cache.hit", True)
                    return cached

                span.set_attribute("cache.hit", False)
                logger.info("Cache miss, loading", cache=self.cache_name, key=key)

                value = await loader()
                if value is None:
                    return value

                await self.redis.set_json(
                    key, self.adapter.dump_python(value, mode="json"), ttl=self.ttl
                )
                return value

    async def evict(self, key: str) -> bool:
        """Remove key; evicting an absent key is not an error."""
        existed = await self.redis.delete(key)
        logger.info(
            "Cache evicted", cache=self.cache_name, key=key, existed=existed
        )
        return existed

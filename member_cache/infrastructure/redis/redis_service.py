"""
Redis Service - Cache Backend Client

Owns the Redis connection pool and exposes the key/value operations the
member cache needs: JSON get/set with TTL, delete, cursor-based key
enumeration and a health check. Failures are wrapped in RedisException
and raised; there is no retry at this boundary.
"""

import asyncio
import json
import time
from typing import Any, Awaitable, Callable, Dict, Optional, Set, TypeVar

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode
import structlog

from ...core.config import Settings, get_settings
from .exceptions import (
    RedisException,
    RedisConnectionException,
    RedisConfigurationException,
    RedisSerializationException,
)

logger = structlog.get_logger()
tracer = trace.get_tracer(__name__)

T = TypeVar("T")


def _decode_key(key: Any) -> str:
    # Keys are arbitrary bytes; invalid UTF-8 becomes U+FFFD
    if isinstance(key, bytes):
        return key.decode("utf-8", errors="replace")
    return str(key)


class RedisService:
    """
    Redis service with a single connection pool.

    A pre-built client can be injected (tests, shared pools); otherwise the
    pool is created from settings on initialize().
    """

    def __init__(
        self, settings: Optional[Settings] = None, client: Optional[Redis] = None
    ):
        self.settings = settings or get_settings()
        self._client: Optional[Redis] = client
        self._pool: Optional[ConnectionPool] = None
        self._initialized = client is not None
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Create the connection pool and verify the server answers PING."""
        if self._initialized:
            return

        async with self._lock:
            if self._initialized:
                return

            try:
                self._pool = ConnectionPool.from_url(
                    self.settings.REDIS_URL,
                    encoding="utf-8",
                    decode_responses=True,
                    encoding_errors="replace",
                    max_connections=self.settings.REDIS_MAX_CONNECTIONS,
                    socket_connect_timeout=self.settings.REDIS_CONNECTION_TIMEOUT,
                    socket_timeout=self.settings.REDIS_OPERATION_TIMEOUT,
                    health_check_interval=self.settings.REDIS_HEALTH_CHECK_INTERVAL,
                )
            except ValueError as e:
                raise RedisConfigurationException(
                    message=f"Invalid Redis connection settings: {e}",
                    config_key="REDIS_URL",
                    config_value=self.settings.REDIS_URL,
                    original_error=e,
                )

            try:
                self._client = Redis(connection_pool=self._pool)
                await self._client.ping()

                self._initialized = True
                logger.info(
                    "Redis service initialized",
                    max_connections=self.settings.REDIS_MAX_CONNECTIONS,
                )

            except (RedisError, OSError) as e:
                logger.error("Failed to initialize Redis service", error=str(e))
                self._client = None
                if self._pool is not None:
                    await self._pool.disconnect()
                    self._pool = None
                raise RedisConnectionException(
                    message=f"Redis service initialization failed: {e}",
                    original_error=e,
                )

    @property
    def client(self) -> Redis:
        if self._client is None:
            raise RedisConnectionException(
                message="Redis service not initialized. Call initialize() first."
            )
        return self._client

    async def _execute(
        self, operation: str, key: str, func: Callable[[Redis], Awaitable[T]]
    ) -> T:
        """Run one Redis command, translating driver errors."""
        with tracer.start_as_current_span(f"redis.{operation}") as span:
            span.set_attribute("redis.operation", operation)
            span.set_attribute("redis.key", key)
            try:
                result = await func(self.client)
                span.set_status(Status(StatusCode.OK))
                return result

            except RedisError as e:
                span.set_status(Status(StatusCode.ERROR, str(e)))
                logger.error(
                    "Redis operation failed",
                    operation=operation,
                    key=key,
                    error=str(e),
                )
                raise RedisException(
                    message=f"Redis {operation} failed for key {key}: {e}",
                    details={"operation": operation, "key": key},
                    original_error=e,
                )

    # ---------- string & json ----------

    async def get(self, key: str) -> Optional[str]:
        return await self._execute("get", key, lambda r: r.get(key))

    async def set(self, key: str, value: str, ttl: Optional[int] = None) -> bool:
        return bool(await self._execute("set", key, lambda r: r.set(key, value, ex=ttl)))

    async def get_json(self, key: str) -> Optional[Any]:
        """Return the decoded JSON value, or None when the key is absent."""
        raw = await self.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError) as e:
            raise RedisSerializationException(key, original_error=e)

    async def set_json(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Store value as JSON, overwriting unconditionally."""
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise RedisSerializationException(key, original_error=e)

        stored = await self.set(key, payload, ttl=ttl)
        logger.debug("Cached value", key=key, ttl=ttl)
        return stored

    async def delete(self, key: str) -> bool:
        """Delete a key; returns False when it did not exist."""
        return await self._execute("delete", key, lambda r: r.delete(key)) > 0

    async def ttl(self, key: str) -> int:
        return await self._execute("ttl", key, lambda r: r.ttl(key))

    # ---------- key enumeration ----------

    async def scan_keys(self, pattern: str = "*", count: Optional[int] = None) -> Set[str]:
        """
        Enumerate keys with cursor-based SCAN.

        Args:
            pattern: MATCH pattern
            count: COUNT hint per round trip (defaults to REDIS_SCAN_COUNT)

        Returns:
            Every matching key; SCAN may repeat keys, the set collapses them
        """
        count = count or self.settings.REDIS_SCAN_COUNT

        async def _drain(r: Redis) -> Set[str]:
            found: Set[str] = set()
            cursor = 0
            while True:
                cursor, keys = await r.scan(cursor, match=pattern, count=count)
                found.update(_decode_key(k) for k in keys)
                if int(cursor) == 0:
                    break
            return found

        return await self._execute("scan", pattern, _drain)

    async def keys(self, pattern: str = "*") -> Set[str]:
        """Blocking KEYS listing. Prefer scan_keys() on large keyspaces."""
        logger.warning("Blocking KEYS command issued", pattern=pattern)
        result = await self._execute("keys", pattern, lambda r: r.keys(pattern))
        return {_decode_key(k) for k in result}

    # ---------- lifecycle ----------

    async def health_check(self) -> Dict[str, Any]:
        """PING the server and report latency."""
        start_time = time.time()
        try:
            await self.client.ping()
            return {
                "status": "healthy",
                "service": "redis",
                "response_time_ms": round((time.time() - start_time) * 1000, 2),
            }
        except (RedisError, RedisException, OSError) as e:
            logger.warning("Redis health check failed", error=str(e))
            return {"status": "unhealthy", "service": "redis", "error": str(e)}

    async def close(self) -> None:
        """Close Redis client and cleanup resources."""
        async with self._lock:
            if self._client is not None:
                await self._client.aclose()
                self._client = None
            if self._pool is not None:
                await self._pool.disconnect()
                self._pool = None
            self._initialized = False

            logger.info("Redis service closed")


# Global Redis service instance
redis_service = RedisService()

"""
Unit tests for RedisService.
"""

from unittest.mock import AsyncMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from member_cache.infrastructure.redis.exceptions import (
    RedisConfigurationException,
    RedisConnectionException,
    RedisException,
    RedisSerializationException,
)
from member_cache.infrastructure.redis.redis_service import RedisService

pytestmark = pytest.mark.redis


class TestRedisServiceValues:
    @pytest.mark.asyncio
    async def test_set_json_then_get_json(self, redis_service):
        await redis_service.set_json("k", {"a": [1, 2]}, ttl=10)

        assert await redis_service.get_json("k") == {"a": [1, 2]}
        assert await redis_service.ttl("k") == 10

    @pytest.mark.asyncio
    async def test_get_json_absent_key(self, redis_service):
        assert await redis_service.get_json("missing") is None

    @pytest.mark.asyncio
    async def test_get_json_invalid_payload(self, redis_service, fake_redis):
        await fake_redis.set("k", "{not json")

        with pytest.raises(RedisSerializationException) as exc_info:
            await redis_service.get_json("k")

        assert exc_info.value.details["key"] == "k"

    @pytest.mark.asyncio
    async def test_set_json_unserializable_value(self, redis_service):
        with pytest.raises(RedisSerializationException):
            await redis_service.set_json("k", object())

    @pytest.mark.asyncio
    async def test_delete_reports_existence(self, redis_service):
        await redis_service.set("k", "v")

        assert await redis_service.delete("k") is True
        assert await redis_service.delete("k") is False


class TestRedisServiceKeys:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("count", [1, 2, 5, 100])
    async def test_scan_keys_collects_all_pages(self, redis_service, count):
        redis_service.client.repeat_scan_keys = True
        for i in range(7):
            await redis_service.set(f"member::{i}", "x")
        await redis_service.set("other", "x")

        keys = await redis_service.scan_keys("member::*", count=count)

        assert keys == {f"member::{i}" for i in range(7)}

    @pytest.mark.asyncio
    async def test_scan_keys_defaults_to_configured_count(self, redis_service, fake_redis):
        for i in range(4):
            await redis_service.set(f"k{i}", "x")

        await redis_service.scan_keys()

        # REDIS_SCAN_COUNT=2 in test settings
        assert fake_redis.scan_calls == 2

    @pytest.mark.asyncio
    async def test_scan_keys_decodes_bytes(self, test_settings):
        client = AsyncMock()
        client.scan.return_value = (0, [b"member::1", "member::2"])
        service = RedisService(settings=test_settings, client=client)

        assert await service.scan_keys() == {"member::1", "member::2"}

    @pytest.mark.asyncio
    async def test_scan_keys_replaces_invalid_utf8(self, test_settings):
        client = AsyncMock()
        client.scan.return_value = (0, [b"member::\xff\xfe", b"member::1"])
        service = RedisService(settings=test_settings, client=client)

        assert await service.scan_keys() == {"member::\ufffd\ufffd", "member::1"}

    @pytest.mark.asyncio
    async def test_pool_decodes_invalid_utf8_with_replacement(self, test_settings):
        service = RedisService(settings=test_settings)

        with patch(
            "member_cache.infrastructure.redis.redis_service.Redis.ping",
            new=AsyncMock(return_value=True),
        ):
            await service.initialize()

        try:
            encoder = service._pool.get_encoder()
            assert service._pool.connection_kwargs["encoding_errors"] == "replace"
            assert encoder.decode(b"member::\xff\xfe") == "member::\ufffd\ufffd"
        finally:
            await service.close()

    @pytest.mark.asyncio
    async def test_keys_blocking_listing(self, redis_service, fake_redis):
        await redis_service.set("a", "1")
        await redis_service.set("b", "1")

        assert await redis_service.keys("*") == {"a", "b"}
        assert fake_redis.keys_calls == 1


class TestRedisServiceErrors:
    @pytest.mark.asyncio
    async def test_driver_error_is_wrapped(self, test_settings):
        client = AsyncMock()
        client.get.side_effect = RedisConnectionError("connection refused")
        service = RedisService(settings=test_settings, client=client)

        with pytest.raises(RedisException) as exc_info:
            await service.get("member::1")

        assert exc_info.value.details["operation"] == "get"
        assert exc_info.value.details["key"] == "member::1"
        assert isinstance(exc_info.value.__cause__, RedisConnectionError)
        client.get.assert_awaited_once_with("member::1")

    @pytest.mark.asyncio
    async def test_uninitialized_client(self, test_settings):
        service = RedisService(settings=test_settings)

        with pytest.raises(RedisConnectionException):
            await service.get("k")

    @pytest.mark.asyncio
    async def test_initialize_failure(self, test_settings):
        service = RedisService(settings=test_settings)

        with patch(
            "member_cache.infrastructure.redis.redis_service.Redis.ping",
            new=AsyncMock(side_effect=RedisConnectionError("refused")),
        ):
            with pytest.raises(RedisConnectionException) as exc_info:
                await service.initialize()

        assert exc_info.value.error_code == "REDIS_CONNECTION_ERROR"
        assert exc_info.value.details["original_error_type"] == "ConnectionError"

    @pytest.mark.asyncio
    async def test_initialize_rejects_malformed_url(self, test_settings):
        test_settings.REDIS_URL = "redis://localhost:notaport/0"
        service = RedisService(settings=test_settings)

        with pytest.raises(RedisConfigurationException) as exc_info:
            await service.initialize()

        assert exc_info.value.details["config_key"] == "REDIS_URL"


class TestRedisServiceLifecycle:
    @pytest.mark.asyncio
    async def test_health_check_healthy(self, redis_service):
        result = await redis_service.health_check()

        assert result["status"] == "healthy"
        assert "response_time_ms" in result

    @pytest.mark.asyncio
    async def test_health_check_unhealthy(self, test_settings):
        client = AsyncMock()
        client.ping.side_effect = RedisConnectionError("down")
        service = RedisService(settings=test_settings, client=client)

        result = await service.health_check()

        assert result["status"] == "unhealthy"
        assert "down" in result["error"]

    @pytest.mark.asyncio
    async def test_close_releases_client(self, redis_service, fake_redis):
        await redis_service.close()

        assert fake_redis.closed is True
        with pytest.raises(RedisConnectionException):
            redis_service.client

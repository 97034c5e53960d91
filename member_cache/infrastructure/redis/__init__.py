"""
Redis Infrastructure Module

This module provides:
- RedisService: connection pool owner and key/value client
- Exceptions raised by every Redis operation
"""

from .redis_service import RedisService, redis_service
from .exceptions import (
    RedisException,
    RedisConnectionException,
    RedisKeyNotFoundException,
    RedisSerializationException,
    RedisConfigurationException,
)

__all__ = [
    "RedisService",
    "redis_service",
    "RedisException",
    "RedisConnectionException",
    "RedisKeyNotFoundException",
    "RedisSerializationException",
    "RedisConfigurationException",
]

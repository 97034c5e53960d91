"""
Redis cache backend errors

Every failure raised by RedisService carries message, error_code and details.
Errors are surfaced to the caller; nothing here retries or falls back.
"""

from typing import Optional, Any, Dict


class RedisException(Exception):
    """Root of the cache backend error hierarchy.

    The driver error, when there is one, is kept as __cause__.
    """

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = "REDIS_ERROR",
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        if original_error:
            self.details.setdefault("original_error", str(original_error))
            self.details.setdefault(
                "original_error_type", type(original_error).__name__
            )
        super().__init__(self.message)
        if original_error:
            self.__cause__ = original_error


class RedisConnectionException(RedisException):
    """The pool could not be created or the server did not answer."""

    def __init__(
        self,
        message: str = "Redis connection failed",
        url: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        details = {}
        if url:
            details["url"] = url

        super().__init__(
            message=message,
            error_code="REDIS_CONNECTION_ERROR",
            details=details,
            original_error=original_error,
        )


class RedisKeyNotFoundException(RedisException):
    """Raised when an expected Redis key is absent or has expired."""

    def __init__(self, key: str):
        """Initialize exception.

        Args:
            key: Absent or expired key
        """
        super().__init__(
            message=f"Redis key not found: {key}",
            error_code="REDIS_KEY_NOT_FOUND",
            details={"key": key},
        )


class RedisSerializationException(RedisException):
    """Raised when a cached value cannot be encoded or decoded."""

    def __init__(self, key: str, original_error: Optional[Exception] = None):
        super().__init__(
            message=f"Failed to (de)serialize cached value for key: {key}",
            error_code="REDIS_SERIALIZATION_ERROR",
            details={"key": key},
            original_error=original_error,
        )


class RedisConfigurationException(RedisException):
    """Connection settings rejected before any connection is attempted."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        original_error: Optional[Exception] = None,
    ):
        details = {}
        if config_key:
            details["config_key"] = config_key
        if config_value is not None:
            details["config_value"] = str(config_value)

        super().__init__(
            message=message,
            error_code="REDIS_CONFIGURATION_ERROR",
            details=details,
            original_error=original_error,
        )

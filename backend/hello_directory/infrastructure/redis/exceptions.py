"""
Redis Infrastructure Exceptions

Failures of the distributed cache backend. All of them are
``BackendUnavailable`` so the cache store can absorb them uniformly.
"""

from typing import Optional

from ...domain.exceptions import BackendUnavailable


class RedisException(BackendUnavailable):
    """Base exception for Redis-related errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        original_error: Optional[Exception] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(
            message=message,
            backend="cache",
            original_error=original_error,
            error_code=error_code or "REDIS_ERROR",
            details=details,
        )


class RedisConnectionException(RedisException):
    """Raised when Redis connection fails or is lost."""

    def __init__(
        self,
        message: str = "Redis connection failed",
        host: Optional[str] = None,
        port: Optional[int] = None,
        original_error: Optional[Exception] = None,
    ):
        details = {}
        if host:
            details["host"] = host
        if port:
            details["port"] = port

        super().__init__(
            message=message,
            error_code="REDIS_CONNECTION_ERROR",
            original_error=original_error,
            details=details,
        )


class RedisOperationTimeoutException(RedisException):
    """Raised when Redis operation times out."""

    def __init__(
        self,
        operation: str,
        timeout_seconds: float,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            message=f"Redis operation '{operation}' timed out after {timeout_seconds}s",
            error_code="REDIS_TIMEOUT_ERROR",
            original_error=original_error,
            details={"operation": operation, "timeout_seconds": timeout_seconds},
        )


class RedisCircuitBreakerOpenException(RedisException):
    """Raised when Redis circuit breaker is open."""

    def __init__(
        self, message: str = "Redis circuit breaker is open - service unavailable"
    ):
        super().__init__(
            message=message,
            error_code="REDIS_CIRCUIT_BREAKER_OPEN",
            details={"service_status": "unavailable"},
        )


class RedisConfigurationException(RedisException):
    """Raised when Redis configuration is invalid."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        details = {"config_key": config_key} if config_key else {}
        super().__init__(
            message=message,
            error_code="REDIS_CONFIGURATION_ERROR",
            original_error=original_error,
            details=details,
        )


class RedisCommandException(RedisException):
    """Raised when Redis rejects a command (OOM, READONLY, WRONGTYPE, NOAUTH)."""

    def __init__(self, operation: str, original_error: Optional[Exception] = None):
        super().__init__(
            message=f"Redis rejected '{operation}': {original_error}",
            error_code="REDIS_COMMAND_ERROR",
            original_error=original_error,
            details={"operation": operation},
        )

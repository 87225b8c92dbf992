"""
Redis Circuit Breaker Implementation

Implements circuit breaker pattern for Redis operations
to prevent cascading failures and provide graceful degradation.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, TypeVar

from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from .exceptions import (
    RedisCircuitBreakerOpenException,
    RedisCommandException,
    RedisConnectionException,
    RedisOperationTimeoutException,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CircuitState(Enum):
    """Circuit breaker states."""

    CLOSED = "closed"  # Normal operation
    OPEN = "open"  # Failing, reject calls
    HALF_OPEN = "half_open"  # Testing if service recovered


@dataclass
class CircuitBreakerConfig:
    """Configuration for circuit breaker."""

    # Failure threshold - number of consecutive failures before opening
    failure_threshold: int = 5

    # Recovery timeout - seconds to wait before trying again
    recovery_timeout: float = 30.0

    # Timeout for individual operations
    operation_timeout: float = 2.0

    # Monitor these exception types as failures
    failure_exceptions: tuple = (
        RedisConnectionError,
        RedisTimeoutError,
        ConnectionError,
        OSError,
    )


@dataclass
class CircuitBreakerMetrics:
    """Metrics for circuit breaker monitoring."""

    total_calls: int = 0
    successful_calls: int = 0
    failed_calls: int = 0
    timeout_calls: int = 0
    rejected_calls: int = 0
    command_errors: int = 0
    circuit_opens: int = 0


class RedisCircuitBreaker:
    """
    Circuit breaker for Redis operations.

    Stops calling Redis once ``failure_threshold`` consecutive calls fail.
    After ``recovery_timeout`` exactly one trial call is let through while
    every concurrent call is rejected; the circuit closes when the trial
    reaches the server and reopens when it does not.

    A command Redis answers with an error (``ResponseError`` and the other
    ``RedisError`` replies) proves the server is reachable, so it is raised
    as ``RedisCommandException`` without counting toward the threshold.
    """

    def __init__(
        self,
        config: Optional[CircuitBreakerConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config or CircuitBreakerConfig()
        self.state = CircuitState.CLOSED
        self.failure_count = 0
        self.last_failure_time: Optional[float] = None
        self.metrics = CircuitBreakerMetrics()
        self._clock = clock
        self._trial_in_flight = False

    async def call(
        self, operation: str, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any
    ) -> T:
        """
        Execute a Redis coroutine with circuit breaker protection.

        Raises:
            RedisCircuitBreakerOpenException: If circuit is open or a trial is running
            RedisOperationTimeoutException: If the call exceeds the operation timeout
            RedisConnectionException: If the call fails with a connectivity error
            RedisCommandException: If Redis answers the command with an error
        """
        self.metrics.total_calls += 1

        if self.state == CircuitState.OPEN:
            if self._should_attempt_reset():
                self._transition(CircuitState.HALF_OPEN)
            else:
                self._reject()

        is_trial = self.state == CircuitState.HALF_OPEN
        if is_trial:
            if self._trial_in_flight:
                self._reject()
            self._trial_in_flight = True

        try:
            result = await asyncio.wait_for(
                func(*args, **kwargs), timeout=self.config.operation_timeout
            )
        except asyncio.TimeoutError as e:
            self.metrics.timeout_calls += 1
            self._record_failure(operation, "timeout")
            raise RedisOperationTimeoutException(
                operation, self.config.operation_timeout, original_error=e
            )
        except self.config.failure_exceptions as e:
            self._record_failure(operation, type(e).__name__)
            raise RedisConnectionException(
                message=f"Redis operation '{operation}' failed: {e}",
                original_error=e,
            )
        except RedisError as e:
            self.metrics.command_errors += 1
            self._record_reachable()
            logger.warning(
                "Circuit breaker: command rejected by Redis",
                extra={"operation": operation, "error": str(e)},
            )
            raise RedisCommandException(operation, original_error=e)
        finally:
            if is_trial:
                self._trial_in_flight = False

        self.metrics.successful_calls += 1
        self._record_reachable()
        return result

    def _reject(self) -> None:
        self.metrics.rejected_calls += 1
        raise RedisCircuitBreakerOpenException()

    def _record_reachable(self) -> None:
        if self.state == CircuitState.HALF_OPEN:
            self._transition(CircuitState.CLOSED)
        self.failure_count = 0

    def _record_failure(self, operation: str, failure_type: str) -> None:
        self.metrics.failed_calls += 1
        self.failure_count += 1
        self.last_failure_time = self._clock()

        if self.state == CircuitState.HALF_OPEN or (
            self.state == CircuitState.CLOSED
            and self.failure_count >= self.config.failure_threshold
        ):
            self.metrics.circuit_opens += 1
            self._transition(CircuitState.OPEN)

        logger.warning(
            "Circuit breaker: operation failed",
            extra={
                "operation": operation,
                "failure_type": failure_type,
                "failure_count": self.failure_count,
                "state": self.state.value,
            },
        )

    def _should_attempt_reset(self) -> bool:
        """Check if enough time has passed to attempt circuit reset."""
        if self.last_failure_time is None:
            return True
        return self._clock() - self.last_failure_time >= self.config.recovery_timeout

    def _transition(self, state: CircuitState) -> None:
        if state != self.state:
            logger.info(
                "Circuit breaker state change",
                extra={"from_state": self.state.value, "to_state": state.value},
            )
            self.state = state

    def get_status(self) -> dict:
        """Get current circuit breaker status for monitoring."""
        return {
            "state": self.state.value,
            "failure_count": self.failure_count,
            "last_failure_time": self.last_failure_time,
            "metrics": {
                "total_calls": self.metrics.total_calls,
                "successful_calls": self.metrics.successful_calls,
                "failed_calls": self.metrics.failed_calls,
                "timeout_calls": self.metrics.timeout_calls,
                "rejected_calls": self.metrics.rejected_calls,
                "command_errors": self.metrics.command_errors,
                "circuit_opens": self.metrics.circuit_opens,
            },
            "config": {
                "failure_threshold": self.config.failure_threshold,
                "recovery_timeout": self.config.recovery_timeout,
                "operation_timeout": self.config.operation_timeout,
            },
        }

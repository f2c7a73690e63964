"""Retry policy for calls to the upstream question bank."""

import logging
import random
import time
from collections.abc import Callable
from dataclasses import dataclass
from functools import wraps
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""
    max_attempts: int = 6
    initial_delay: float = 1.0
    exponential_base: float = 2.0
    max_delay: float = 60.0
    jitter: float = 0.4


class RetryableError(Exception):
    """Base exception for retryable errors."""
    pass


class APIError(RetryableError):
    """Raised for upstream API failures."""
    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        retry_after: float | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.retry_after = retry_after

    @property
    def is_retryable(self) -> bool:
        """Check if error is retryable based on status code."""
        if self.status_code is None:
            return True
        # Retry on 429 (rate limit), 500-599 (server errors), 408 (timeout)
        return self.status_code in {408, 429} or 500 <= self.status_code < 600


def exponential_backoff_with_jitter(
    attempt: int,
    initial_delay: float,
    exponential_base: float,
    max_delay: float,
    jitter: float = 0.0,
) -> float:
    """Calculate exponential backoff delay with additive jitter.

    Args:
        attempt: Current attempt number (0-indexed)
        initial_delay: Initial delay in seconds
        exponential_base: Base for exponential growth
        max_delay: Maximum delay in seconds, before jitter
        jitter: Upper bound of the random seconds added

    Returns:
        Delay in seconds
    """
    delay = min(initial_delay * (exponential_base ** attempt), max_delay)
    if jitter > 0:
        delay += random.uniform(0, jitter)
    return delay


def default_retryable(exc: BaseException) -> bool:
    if isinstance(exc, APIError):
        return exc.is_retryable
    return isinstance(exc, (RetryableError, ConnectionError, TimeoutError, OSError))


class RetryPolicy:
    """Runs a callable with bounded, backed-off retries.

    The retry predicate and the sleep function are injectable so the policy
    can be exercised without a network or a wall clock.
    """

    def __init__(
        self,
        config: RetryConfig | None = None,
        retryable: Callable[[BaseException], bool] = default_retryable,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config or RetryConfig()
        self.retryable = retryable
        self.sleep = sleep

    def delay_for(self, attempt: int, exc: BaseException | None = None) -> float:
        cfg = self.config
        delay = exponential_backoff_with_jitter(
            attempt, cfg.initial_delay, cfg.exponential_base, cfg.max_delay, cfg.jitter
        )
        retry_after = getattr(exc, "retry_after", None)
        if retry_after:
            delay = max(delay, float(retry_after))
        return delay

    def call(self, func: Callable[..., T], *args, **kwargs) -> T:
        """Call ``func`` until it succeeds or attempts run out.

        Raises:
            The last exception once attempts are exhausted, or immediately
            for exceptions the predicate deems non-retryable.
        """
        attempts = max(1, self.config.max_attempts)
        for attempt in range(attempts):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                if not self.retryable(e):
                    logger.error(f"Non-retryable error: {e}")
                    raise
                if attempt == attempts - 1:
                    logger.error(f"All {attempts} attempts failed. Last error: {e}")
                    raise
                delay = self.delay_for(attempt, e)
                logger.warning(
                    f"Attempt {attempt + 1}/{attempts} failed: {e}. "
                    f"Retrying in {delay:.2f}s...",
                    extra={"attempt": attempt + 1, "status_code": getattr(e, "status_code", None)},
                )
                self.sleep(delay)
        raise RuntimeError(f"Failed after {attempts} attempts")


def with_retry(policy: RetryPolicy | None = None) -> Callable:
    """Decorator to add retry logic to functions.

    Args:
        policy: Retry policy; defaults to ``RetryPolicy()``

    Returns:
        Decorated function with retry logic
    """
    if policy is None:
        policy = RetryPolicy()

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            return policy.call(func, *args, **kwargs)
        return wrapper
    return decorator

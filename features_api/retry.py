# ============================================================================
# CLAUDE CONTEXT - FEATURES API RETRY POLICY
# ============================================================================
# STATUS: Standalone Module - Retry with backoff
# PURPOSE: Reusable retry policy wrapping fallible store queries
# EXPORTS: RetryPolicy, RetryOutcome, linear_backoff, exponential_backoff
# DEPENDENCIES: time, dataclasses, util_logger
# PATTERNS: Higher-order function, Result object instead of raising
# ============================================================================

"""
Retry Policy

Wraps a zero-argument callable and retries it with a backoff between
attempts. The outcome is returned as a RetryOutcome instead of raising,
so callers decide how a final failure maps to a response.

    policy = RetryPolicy(max_attempts=3, backoff=exponential_backoff(1.0, 5.0))
    outcome = policy.run(lambda: repository.find_batch(skip, limit))
    if not outcome.succeeded:
        ...  # outcome.error, outcome.attempts

Backoff functions take the 1-based number of the attempt that just failed
and return the seconds to wait before the next one. No wait follows the
final attempt.
"""

import time
import logging
from dataclasses import dataclass
from typing import Callable, Generic, Optional, Tuple, Type, TypeVar

from util_logger import LoggerFactory, ComponentType

T = TypeVar("T")

BackoffFunction = Callable[[int], float]


def linear_backoff(base_seconds: float) -> BackoffFunction:
    """Wait base_seconds x attempt (1s, 2s, 3s... for base 1)."""
    def backoff(attempt: int) -> float:
        return base_seconds * attempt
    return backoff


def exponential_backoff(base_seconds: float, cap_seconds: float) -> BackoffFunction:
    """Wait base_seconds x 2^(attempt-1), never more than cap_seconds."""
    def backoff(attempt: int) -> float:
        return min(base_seconds * (2 ** (attempt - 1)), cap_seconds)
    return backoff


@dataclass(frozen=True)
class RetryOutcome(Generic[T]):
    """
    Result of running an operation under a RetryPolicy.

    Exactly one of value/error is meaningful: value when succeeded,
    error (the last exception seen) otherwise.
    """
    value: Optional[T]
    error: Optional[BaseException]
    attempts: int

    @property
    def succeeded(self) -> bool:
        return self.error is None


class RetryPolicy:
    """
    Retry an operation up to max_attempts times.

    Args:
        max_attempts: Total attempts including the first
        backoff: Seconds to wait after a failed attempt
        sleep: Sleep function (injectable for tests)
        give_up_on: Exception types that end the loop immediately
        name: Operation name for log messages
        logger: Optional logger (defaults to a SERVICE logger)
    """

    def __init__(
        self,
        max_attempts: int = 3,
        backoff: BackoffFunction = linear_backoff(1.0),
        sleep: Callable[[float], None] = time.sleep,
        give_up_on: Tuple[Type[BaseException], ...] = (),
        name: str = "operation",
        logger: Optional[logging.Logger] = None
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.backoff = backoff
        self.sleep = sleep
        self.give_up_on = give_up_on
        self.name = name
        self.logger = logger or LoggerFactory.create_logger(ComponentType.SERVICE, "RetryPolicy")

    def run(self, operation: Callable[[], T]) -> RetryOutcome[T]:
        """
        Run operation until it succeeds or attempts run out.

        Args:
            operation: Zero-argument callable

        Returns:
            RetryOutcome with the value or the last error
        """
        last_error: Optional[BaseException] = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                value = operation()
                return RetryOutcome(value=value, error=None, attempts=attempt)
            except self.give_up_on as e:
                self.logger.warning(f"{self.name} aborted on attempt {attempt}/{self.max_attempts}: {e}")
                return RetryOutcome(value=None, error=e, attempts=attempt)
            except Exception as e:
                last_error = e
                self.logger.error(
                    f"❌ {self.name} failed (attempt {attempt}/{self.max_attempts}): {e}",
                    extra={'custom_dimensions': {
                        'operation': self.name,
                        'attempt': attempt,
                        'max_attempts': self.max_attempts,
                        'error_type': type(e).__name__
                    }}
                )

                if attempt < self.max_attempts:
                    wait_seconds = self.backoff(attempt)
                    self.logger.info(f"⏳ Retrying {self.name} in {wait_seconds:g}s...")
                    self.sleep(wait_seconds)

        return RetryOutcome(value=None, error=last_error, attempts=self.max_attempts)

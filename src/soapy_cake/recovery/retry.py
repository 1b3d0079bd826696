"""
Retry policies for remote calls.

Provides a synchronous retry loop with pluggable backoff. Only exceptions
of the configured types are retried; anything else propagates at once.
When attempts run out the last exception is re-raised unchanged.
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Tuple, Type


class RetryPolicy(ABC):
    """
    Abstract base class for retry policies.

    Defines the retry loop; subclasses supply the backoff delay. One policy
    may serve several threads; the statistics are updated under a lock.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        retry_on: Tuple[Type[BaseException], ...] = (Exception,),
        sleep: Optional[Callable[[float], Any]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize retry policy.

        Args:
            max_attempts: Total number of attempts, first try included
            base_delay: Base delay between retries in seconds
            retry_on: Exception types that trigger a retry
            sleep: Sleep function, defaults to time.sleep
            logger: Where retry attempts are logged, defaults to this module's logger
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.retry_on = retry_on
        self.sleep = sleep
        self.logger = logger or logging.getLogger(__name__)

        # Statistics
        self._stats_lock = threading.Lock()
        self.total_attempts = 0
        self.total_retries = 0
        self.total_successes = 0
        self.total_failures = 0

    @abstractmethod
    def calculate_delay(self, attempt: int) -> float:
        """
        Calculate delay after a failed attempt.

        Args:
            attempt: Number of the attempt that just failed (1-based)

        Returns:
            Delay in seconds
        """

    def should_retry(self, attempt: int, exception: BaseException) -> bool:
        """Retry while attempts remain and the exception is retryable."""
        if attempt >= self.max_attempts:
            return False
        return isinstance(exception, self.retry_on)

    def execute(self, func: Callable, *args, **kwargs) -> Any:
        """
        Execute function with retry policy.

        Args:
            func: Function to execute
            *args: Function arguments
            **kwargs: Function keyword arguments

        Returns:
            Function result

        Raises:
            The last exception raised by ``func`` once retries are exhausted,
            or the first non-retryable one
        """
        attempt = 0
        while True:
            attempt += 1
            self._count("total_attempts")
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                if not self.should_retry(attempt, e):
                    self._count("total_failures")
                    raise

                delay = self.calculate_delay(attempt)
                self._count("total_retries")
                self.logger.warning(
                    f"Attempt {attempt}/{self.max_attempts} failed: {e}. "
                    f"Retrying in {delay:.2f}s..."
                )
                (self.sleep or time.sleep)(delay)
                continue

            self._count("total_successes")
            if attempt > 1:
                self.logger.info(f"Operation succeeded on attempt {attempt}")
            return result

    def _count(self, name: str) -> None:
        with self._stats_lock:
            setattr(self, name, getattr(self, name) + 1)

    def get_stats(self) -> dict:
        """Get retry policy statistics."""
        with self._stats_lock:
            return {
                "total_attempts": self.total_attempts,
                "total_retries": self.total_retries,
                "total_successes": self.total_successes,
                "total_failures": self.total_failures,
            }


class ExponentialBackoff(RetryPolicy):
    """
    Exponential backoff retry policy.

    Delay grows with each failed attempt: base_delay * (factor ^ (attempt - 1)).
    With the defaults the waits are 1, 3, 9, 27... seconds.
    """

    def __init__(self, max_attempts: int = 5, base_delay: float = 1.0, factor: float = 3.0, **kwargs):
        super().__init__(max_attempts, base_delay, **kwargs)
        self.factor = factor

    def calculate_delay(self, attempt: int) -> float:
        return self.base_delay * (self.factor ** (attempt - 1))


__all__ = ["RetryPolicy", "ExponentialBackoff"]

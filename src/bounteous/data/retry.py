# src/bounteous/data/retry.py
"""Execution strategies: how a context runs a unit of database work.

Retrying strategies re-run the whole operation after a transient failure
with exponential backoff. Whether an error is transient is provider
knowledge, so :meth:`RetryingExecutionStrategy.should_retry_on` is left to
provider packages.
"""

import logging
import random
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, FrozenSet, Optional, TypeVar

from .errors import ConfigurationError

T = TypeVar('T')

RetryCallback = Callable[[int, float, Exception], None]

DEFAULT_MAX_RETRY_COUNT = 6
DEFAULT_MAX_RETRY_DELAY = 30.0
DEFAULT_BASE_DELAY = 1.0
# Upper bound of the random factor applied to each delay
MAX_JITTER = 1.1


@dataclass(frozen=True)
class RetryOptions:
    """
    Retry-on-failure settings.

    :param max_retry_count: Retries after the first attempt (default: 6).
    :param max_retry_delay: Cap in seconds for a single delay (default: 30.0).
    :param base_delay: Delay in seconds before the first retry, doubled for each further retry (default: 1.0).
    :param error_numbers_to_add: Extra provider error numbers treated as transient.
    """
    max_retry_count: int = DEFAULT_MAX_RETRY_COUNT
    max_retry_delay: float = DEFAULT_MAX_RETRY_DELAY
    base_delay: float = DEFAULT_BASE_DELAY
    error_numbers_to_add: FrozenSet[int] = field(default_factory=frozenset)

    def __post_init__(self):
        if self.max_retry_count < 0:
            raise ConfigurationError(f"max_retry_count must not be negative, got {self.max_retry_count}")
        if self.max_retry_delay < 0 or self.base_delay < 0:
            raise ConfigurationError("Retry delays must not be negative")


class ExecutionStrategy(ABC):
    """Runs operations on behalf of a context."""

    @property
    def retries_on_failure(self) -> bool:
        return False

    @abstractmethod
    def execute(self, operation: Callable[[], T], on_retry: Optional[RetryCallback] = None) -> T:
        """Run ``operation`` and return its result."""
        pass


class NonRetryingExecutionStrategy(ExecutionStrategy):
    """Runs each operation exactly once."""

    def execute(self, operation: Callable[[], T], on_retry: Optional[RetryCallback] = None) -> T:
        return operation()


class RetryingExecutionStrategy(ExecutionStrategy):
    """
    Re-runs an operation while it fails with a transient error.

    At most ``max_retry_count + 1`` attempts are made. When retries are
    exhausted, or the error is not transient, the last exception is
    re-raised unchanged.
    """

    def __init__(self, options: RetryOptions = None, sleep: Callable[[float], None] = time.sleep,
                 logger: logging.Logger = None):
        self.options = options or RetryOptions()
        self._sleep = sleep
        self.logger = logger or logging.getLogger('bounteous.data.retry')

    @property
    def retries_on_failure(self) -> bool:
        return True

    @property
    def max_retry_count(self) -> int:
        return self.options.max_retry_count

    @abstractmethod
    def should_retry_on(self, error: Exception) -> bool:
        """Whether ``error`` is transient."""
        pass

    def get_delay(self, attempt: int) -> float:
        """Delay in seconds before retry number ``attempt`` (zero-based)."""
        delay = self.options.base_delay * (2 ** attempt) * random.uniform(1.0, MAX_JITTER)
        return min(delay, self.options.max_retry_delay)

    def execute(self, operation: Callable[[], T], on_retry: Optional[RetryCallback] = None) -> T:
        attempt = 0
        while True:
            try:
                return operation()
            except Exception as e:
                if attempt >= self.options.max_retry_count or not self.should_retry_on(e):
                    raise
                delay = self.get_delay(attempt)
                attempt += 1
                self.logger.warning(
                    f"Transient failure ({type(e).__name__}: {e}), "
                    f"retry {attempt}/{self.options.max_retry_count} in {delay:.2f}s")
                if on_retry is not None:
                    on_retry(attempt, delay, e)
                self._sleep(delay)

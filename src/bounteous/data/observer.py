# src/bounteous/data/observer.py
"""Context lifecycle observers"""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .context import DbContext


class DbContextObserver:
    """
    Receives notifications from the contexts it is handed to.

    Every hook is a no-op here, so observers override only what they need.
    Hooks must not raise: an exception escaping a hook propagates out of the
    context operation that triggered it.
    """

    def on_context_created(self, context: 'DbContext') -> None:
        pass

    def on_command_executed(self, context: 'DbContext', sql: str, duration: float) -> None:
        pass

    def on_command_failed(self, context: 'DbContext', sql: str, error: Exception) -> None:
        pass

    def on_retry(self, context: 'DbContext', attempt: int, delay: float, error: Exception) -> None:
        pass

    def on_context_disposed(self, context: 'DbContext') -> None:
        pass


class LoggingObserver(DbContextObserver):
    """Observer that writes every notification to a logger"""

    def __init__(self, logger: logging.Logger = None, level: int = logging.DEBUG):
        self.logger = logger or logging.getLogger('bounteous.data.observer')
        self.level = level

    def on_context_created(self, context: 'DbContext') -> None:
        self.logger.log(self.level, f"Context created: {type(context).__name__}")

    def on_command_executed(self, context: 'DbContext', sql: str, duration: float) -> None:
        self.logger.log(self.level, f"Command executed in {duration:.4f}s")

    def on_command_failed(self, context: 'DbContext', sql: str, error: Exception) -> None:
        self.logger.log(self.level, f"Command failed: {type(error).__name__}")

    def on_retry(self, context: 'DbContext', attempt: int, delay: float, error: Exception) -> None:
        self.logger.log(self.level, f"Retry {attempt} scheduled in {delay:.2f}s after {type(error).__name__}")

    def on_context_disposed(self, context: 'DbContext') -> None:
        self.logger.log(self.level, f"Context disposed: {type(context).__name__}")

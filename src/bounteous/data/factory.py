# src/bounteous/data/factory.py
"""Context factories"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from .connection import ConnectionBuilder
from .context import DbContext
from .observer import DbContextObserver
from .options import DbContextOptions

T = TypeVar('T', bound=DbContext)


class DbContextFactory(ABC, Generic[T]):
    """
    Creates one context per unit of work.

    Provider packages implement :meth:`_apply_options`; applications
    implement :meth:`_create` to instantiate their own context type.
    """

    def __init__(self, connection_builder: ConnectionBuilder, observer: DbContextObserver):
        self.connection_builder = connection_builder
        self.observer = observer

    def create_context(self, sensitive_data_logging_enabled: bool = False) -> T:
        """Build fresh options and a new context from them."""
        options = self._apply_options(sensitive_data_logging_enabled)
        return self._create(options, self.observer)

    @abstractmethod
    def _apply_options(self, sensitive_data_logging_enabled: bool = False) -> DbContextOptions:
        pass

    @abstractmethod
    def _create(self, options: DbContextOptions, observer: DbContextObserver) -> T:
        pass

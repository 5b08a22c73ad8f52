# src/bounteous/data/options.py
"""Context options and their fluent builder.

Options are immutable. Each builder call swaps in a new
:class:`DbContextOptions`, so the object returned by
:attr:`DbContextOptionsBuilder.options` never changes afterwards.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Optional, Type

from .connection import mask_connection_string
from .retry import ExecutionStrategy

_WORD_START = re.compile(r'([^_])([A-Z][a-z]+)')
_LOWER_UPPER = re.compile(r'([a-z0-9])([A-Z])')


def to_snake_case(name: str) -> str:
    """``OrderLine`` -> ``order_line``, ``HTTPRequest`` -> ``http_request``"""
    name = _WORD_START.sub(r'\1_\2', name)
    return _LOWER_UPPER.sub(r'\1_\2', name).lower()


class NamingConvention(Enum):
    """How entity class names become table names"""
    AS_IS = 'as_is'
    SNAKE_CASE = 'snake_case'
    LOWER_CASE = 'lower_case'
    UPPER_CASE = 'upper_case'
    UPPER_SNAKE_CASE = 'upper_snake_case'

    def convert(self, name: str) -> str:
        if self is NamingConvention.SNAKE_CASE:
            return to_snake_case(name)
        if self is NamingConvention.LOWER_CASE:
            return name.lower()
        if self is NamingConvention.UPPER_CASE:
            return name.upper()
        if self is NamingConvention.UPPER_SNAKE_CASE:
            return to_snake_case(name).upper()
        return name


class ProviderExtension(ABC):
    """Database provider settings carried by context options."""

    name: str = 'provider'

    @property
    @abstractmethod
    def connection_string(self) -> str:
        pass

    @property
    @abstractmethod
    def connection_config(self) -> Any:
        """Connection configuration object understood by :attr:`backend_class`."""
        pass

    @property
    @abstractmethod
    def backend_class(self) -> Type:
        pass

    @abstractmethod
    def create_execution_strategy(self) -> ExecutionStrategy:
        pass

    def create_backend(self):
        """Build a new, not yet connected backend."""
        return self.backend_class(connection_config=self.connection_config)

    def describe(self, sensitive: bool = False) -> str:
        connection_string = self.connection_string if sensitive else mask_connection_string(self.connection_string)
        return f"{self.name} ({connection_string})"


@dataclass(frozen=True)
class DbContextOptions:
    """Settings a context is created with."""
    provider: Optional[ProviderExtension] = None
    sensitive_data_logging: bool = False
    detailed_errors: bool = False
    naming_convention: NamingConvention = NamingConvention.AS_IS

    @property
    def is_configured(self) -> bool:
        return self.provider is not None


class DbContextOptionsBuilder:
    """Fluent builder for :class:`DbContextOptions`"""

    def __init__(self, options: Optional[DbContextOptions] = None):
        self._options = options if options is not None else DbContextOptions()

    @property
    def options(self) -> DbContextOptions:
        return self._options

    @property
    def is_configured(self) -> bool:
        return self._options.is_configured

    def use_provider(self, extension: ProviderExtension) -> 'DbContextOptionsBuilder':
        self._options = replace(self._options, provider=extension)
        return self

    def enable_sensitive_data_logging(self, enabled: bool = True) -> 'DbContextOptionsBuilder':
        """Allow statement parameters and credentials to appear in logs."""
        self._options = replace(self._options, sensitive_data_logging=enabled)
        return self

    def enable_detailed_errors(self, enabled: bool = True) -> 'DbContextOptionsBuilder':
        """Log failing statements alongside the error."""
        self._options = replace(self._options, detailed_errors=enabled)
        return self

    def use_naming_convention(self, convention: NamingConvention) -> 'DbContextOptionsBuilder':
        self._options = replace(self._options, naming_convention=convention)
        return self

# src/bounteous/data/__init__.py
"""
Generic data-access layer.

This package provides the provider-independent pieces of a persistence context:
- Context factories creating one context per unit of work
- Contexts owning a backend created from immutable options
- A fluent options builder with naming conventions and logging toggles
- Connection-string sources and parsing
- Execution strategies, with a retry-on-failure base
- Observers receiving context lifecycle notifications

Provider packages (for example ``bounteous.data.mysql``) supply the provider
extension that turns options into a concrete ORM backend.
"""

__version__ = "1.0.0"

from .connection import (
    ConnectionBuilder,
    StaticConnectionBuilder,
    parse_connection_string,
    mask_connection_string,
)
from .context import DbContext, ModelBuilder
from .errors import DataError, ConfigurationError, ContextDisposedError
from .factory import DbContextFactory
from .observer import DbContextObserver, LoggingObserver
from .options import (
    DbContextOptions,
    DbContextOptionsBuilder,
    NamingConvention,
    ProviderExtension,
)
from .retry import (
    ExecutionStrategy,
    NonRetryingExecutionStrategy,
    RetryingExecutionStrategy,
    RetryOptions,
)


__all__ = [
    # Factory and context
    'DbContextFactory',
    'DbContext',
    'ModelBuilder',

    # Options
    'DbContextOptions',
    'DbContextOptionsBuilder',
    'NamingConvention',
    'ProviderExtension',

    # Connection
    'ConnectionBuilder',
    'StaticConnectionBuilder',
    'parse_connection_string',
    'mask_connection_string',

    # Execution strategies
    'ExecutionStrategy',
    'NonRetryingExecutionStrategy',
    'RetryingExecutionStrategy',
    'RetryOptions',

    # Observers
    'DbContextObserver',
    'LoggingObserver',

    # Errors
    'DataError',
    'ConfigurationError',
    'ContextDisposedError',
]

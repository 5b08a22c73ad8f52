# src/bounteous/data/mysql/options.py
"""MySQL provider options.

``use_mysql`` attaches a :class:`MySQLOptionsExtension` to a context options
builder; the optional action customizes it through a
:class:`MySQLDbContextOptionsBuilder`::

    options = (use_mysql(DbContextOptionsBuilder(), connection_string,
                         lambda mysql: mysql.enable_retry_on_failure())
               .enable_detailed_errors()
               .options)
"""

import logging
from typing import Any, Callable, Dict, Iterable, Optional, Tuple, Type, Union

from rhosocial.activerecord.backend.impl.mysql import MySQLBackend, MySQLConnectionConfig

from bounteous.data.errors import ConfigurationError
from bounteous.data.options import DbContextOptionsBuilder, ProviderExtension
from bounteous.data.retry import (
    DEFAULT_MAX_RETRY_COUNT,
    DEFAULT_MAX_RETRY_DELAY,
    ExecutionStrategy,
    NonRetryingExecutionStrategy,
    RetryOptions,
)
from .connection_string import parse_mysql_connection_string
from .retry import MySQLRetryingExecutionStrategy

logger = logging.getLogger('bounteous.data.mysql')

ServerVersion = Tuple[int, int, int]


def parse_server_version(version: Union[str, Iterable[int]]) -> ServerVersion:
    """``"8.0.36-log"`` or ``(8, 0)`` -> ``(8, 0, 36)`` / ``(8, 0, 0)``"""
    try:
        if isinstance(version, str):
            parts = [int(part) for part in version.strip().split('-')[0].split('.') if part]
        else:
            parts = [int(part) for part in version]
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid MySQL server version: {version!r}")

    if not parts or len(parts) > 3:
        raise ConfigurationError(f"Invalid MySQL server version: {version!r}")
    return tuple(parts + [0] * (3 - len(parts)))


class MySQLOptionsExtension(ProviderExtension):
    """MySQL settings of a context's options. Immutable once built."""

    name = 'MySQL'

    def __init__(self, connection_string: str, retry: Optional[RetryOptions] = None,
                 server_version: Optional[ServerVersion] = None, backend_class: Optional[Type] = None):
        self._connection_string = connection_string
        self._connection_params = parse_mysql_connection_string(connection_string)
        self._retry = retry
        self._server_version = server_version
        self._backend_class = backend_class
        self._connection_config = None

    @property
    def connection_string(self) -> str:
        return self._connection_string

    @property
    def connection_params(self) -> Dict[str, Any]:
        """Config keyword arguments parsed from the connection string"""
        params = dict(self._connection_params)
        if self._server_version is not None:
            params['version'] = self._server_version
        return params

    @property
    def retry(self) -> Optional[RetryOptions]:
        return self._retry

    @property
    def retry_on_failure_enabled(self) -> bool:
        return self._retry is not None

    @property
    def server_version(self) -> Optional[ServerVersion]:
        return self._server_version

    @property
    def backend_class(self) -> Type:
        return self._backend_class or MySQLBackend

    @property
    def connection_config(self) -> MySQLConnectionConfig:
        if self._connection_config is None:
            params = self.connection_params
            options = dict(params.pop('options', {}))
            connect_timeout = options.pop('connect_timeout', None)
            if options:
                params['options'] = options

            config = MySQLConnectionConfig(**params)
            # Not a declared config field; the backend reads it as an attribute when connecting
            if connect_timeout is not None:
                config.connect_timeout = connect_timeout
            self._connection_config = config
        return self._connection_config

    def create_execution_strategy(self) -> ExecutionStrategy:
        if self._retry is None:
            return NonRetryingExecutionStrategy()
        return MySQLRetryingExecutionStrategy(self._retry, logger=logger)


class MySQLDbContextOptionsBuilder:
    """Customizes the MySQL extension inside ``use_mysql``."""

    def __init__(self, connection_string: str):
        self._connection_string = connection_string
        self._retry: Optional[RetryOptions] = None
        self._server_version: Optional[ServerVersion] = None
        self._backend_class: Optional[Type] = None

    def enable_retry_on_failure(self, max_retry_count: int = DEFAULT_MAX_RETRY_COUNT,
                                max_retry_delay: float = DEFAULT_MAX_RETRY_DELAY,
                                error_numbers_to_add: Optional[Iterable[int]] = None) -> 'MySQLDbContextOptionsBuilder':
        """Retry operations that fail with transient MySQL errors."""
        self._retry = RetryOptions(
            max_retry_count=max_retry_count,
            max_retry_delay=max_retry_delay,
            error_numbers_to_add=frozenset(error_numbers_to_add or ()),
        )
        return self

    def server_version(self, version: Union[str, Iterable[int]]) -> 'MySQLDbContextOptionsBuilder':
        """Declare the server version instead of querying it on connect."""
        self._server_version = parse_server_version(version)
        return self

    def use_backend(self, backend_class: Type) -> 'MySQLDbContextOptionsBuilder':
        """Use a backend class other than ``MySQLBackend``."""
        self._backend_class = backend_class
        return self

    def build(self) -> MySQLOptionsExtension:
        return MySQLOptionsExtension(
            self._connection_string,
            retry=self._retry,
            server_version=self._server_version,
            backend_class=self._backend_class,
        )


def use_mysql(options_builder: DbContextOptionsBuilder, connection_string: str,
              mysql_options_action: Optional[Callable[[MySQLDbContextOptionsBuilder], Any]] = None
              ) -> DbContextOptionsBuilder:
    """
    Configure a context to use MySQL.

    Args:
        options_builder: Builder to configure
        connection_string: MySQL connection string
        mysql_options_action: Called with a MySQLDbContextOptionsBuilder before
            the extension is built

    Returns:
        DbContextOptionsBuilder: ``options_builder``, for chaining

    Raises:
        ConfigurationError: Connection string is empty or malformed
    """
    if connection_string is None or not connection_string.strip():
        raise ConfigurationError("A MySQL connection string is required")

    mysql_builder = MySQLDbContextOptionsBuilder(connection_string)
    if mysql_options_action is not None:
        mysql_options_action(mysql_builder)
    return options_builder.use_provider(mysql_builder.build())

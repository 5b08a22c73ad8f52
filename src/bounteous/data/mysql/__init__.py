# src/bounteous/data/mysql/__init__.py
"""
MySQL extension of the bounteous.data access layer.

This module parameterizes the generic context machinery for MySQL:
- MySQLDbContextFactory: context factory with retry-on-failure, detailed
  errors and a sensitive-data-logging toggle pre-set
- use_mysql / MySQLDbContextOptionsBuilder: MySQL provider options
- MySQL connection-string parsing (Connector/NET keywords)
- Transient-error retry strategy keyed on MySQL error numbers
- Connection settings loaded from files or the environment

Architecture:
- Contexts talk to the ORM through rhosocial-activerecord's MySQLBackend
- MySQLBackend talks to the server through mysql-connector-python
- Nothing here reimplements the ORM or the driver
"""

__version__ = "1.0.0"

from .config import MySQLConnectionSettings, SettingsConnectionBuilder, load_connection_settings
from .connection_string import parse_mysql_connection_string
from .factory import MySQLDbContextFactory
from .options import (
    MySQLDbContextOptionsBuilder,
    MySQLOptionsExtension,
    parse_server_version,
    use_mysql,
)
from .retry import MySQLRetryingExecutionStrategy, TRANSIENT_ERROR_NUMBERS


__all__ = [
    # Factory
    'MySQLDbContextFactory',

    # Options
    'use_mysql',
    'MySQLDbContextOptionsBuilder',
    'MySQLOptionsExtension',
    'parse_server_version',

    # Connection strings and settings
    'parse_mysql_connection_string',
    'MySQLConnectionSettings',
    'SettingsConnectionBuilder',
    'load_connection_settings',

    # Retry
    'MySQLRetryingExecutionStrategy',
    'TRANSIENT_ERROR_NUMBERS',
]

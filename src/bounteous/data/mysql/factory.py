# src/bounteous/data/mysql/factory.py
"""MySQL context factory.

Applications subclass :class:`MySQLDbContextFactory` with their context type and
implement ``_create``; option building is shared.
"""

import logging
from typing import Optional, Tuple

from bounteous.data.connection import mask_connection_string
from bounteous.data.factory import DbContextFactory, T
from bounteous.data.options import DbContextOptions, DbContextOptionsBuilder, NamingConvention
from .options import MySQLDbContextOptionsBuilder, use_mysql

logger = logging.getLogger('bounteous.data.mysql')


class MySQLDbContextFactory(DbContextFactory[T]):
    """
    Context factory pre-configured for MySQL.

    Options always enable retry-on-failure and detailed errors, and take
    the sensitive-data-logging flag from the caller. Subclasses implement
    ``_create`` and may set ``naming_convention`` or ``server_version``.
    """

    naming_convention: NamingConvention = NamingConvention.AS_IS
    server_version: Optional[Tuple[int, int, int]] = None

    def _configure_mysql(self, mysql_options: MySQLDbContextOptionsBuilder) -> None:
        mysql_options.enable_retry_on_failure()
        if self.server_version is not None:
            mysql_options.server_version(self.server_version)

    def _apply_options(self, sensitive_data_logging_enabled: bool = False) -> DbContextOptions:
        connection_string = self.connection_builder.admin_connection_string
        if sensitive_data_logging_enabled:
            logger.debug(f"Applying MySQL options for {connection_string}")
        else:
            logger.debug(f"Applying MySQL options for {mask_connection_string(connection_string)}")

        return (use_mysql(DbContextOptionsBuilder(), connection_string, self._configure_mysql)
                .enable_sensitive_data_logging(sensitive_data_logging_enabled)
                .enable_detailed_errors()
                .use_naming_convention(self.naming_convention)
                .options)

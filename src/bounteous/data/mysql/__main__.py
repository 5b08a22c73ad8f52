# src/bounteous/data/mysql/__main__.py
import argparse
import datetime
import decimal
import json
import logging
import os
import sys

from rhosocial.activerecord.backend.errors import ConnectionError, DatabaseError, QueryError

from bounteous.data.connection import StaticConnectionBuilder
from bounteous.data.context import DbContext
from bounteous.data.errors import ConfigurationError
from bounteous.data.observer import LoggingObserver
from .config import SettingsConnectionBuilder
from .factory import MySQLDbContextFactory

# Configure basic logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


class QueryContext(DbContext):
    """Context without models, used to run ad hoc statements"""

    def register_models(self, model_builder):
        pass


class QueryContextFactory(MySQLDbContextFactory[QueryContext]):

    def _create(self, options, observer):
        return QueryContext(options, observer)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Execute SQL queries against MySQL through a bounteous.data context.",
        formatter_class=argparse.RawTextHelpFormatter
    )

    parser.add_argument(
        '--connection-string',
        default=os.getenv('BOUNTEOUS_MYSQL_CONNECTION_STRING'),
        help='MySQL connection string (default: BOUNTEOUS_MYSQL_CONNECTION_STRING environment variable).\n'
             'When absent, settings are loaded from config files or MYSQL_* environment variables.'
    )
    parser.add_argument(
        '--config',
        default=None,
        help='TOML or YAML file with MySQL connection settings'
    )
    parser.add_argument(
        'query',
        help='SQL query to execute. Must be enclosed in quotes.'
    )
    parser.add_argument('--sensitive-data-logging', action='store_true',
                        help='Include statement parameters and credentials in logs')
    parser.add_argument('--log-level', default='INFO', help='Set logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)')

    return parser.parse_args(argv)


def json_serializer(obj):
    """Handles serialization of types not supported by default JSON encoder."""
    if isinstance(obj, (datetime.datetime, datetime.date, datetime.time)):
        return obj.isoformat()
    if isinstance(obj, datetime.timedelta):
        return str(obj)
    if isinstance(obj, decimal.Decimal):
        return str(obj)
    if isinstance(obj, (bytes, bytearray)):
        return obj.hex()
    raise TypeError(f"Object of type {obj.__class__.__name__} is not JSON serializable")


def handle_result(result):
    if result:
        logger.info(f"Query executed successfully. Affected rows: {result.affected_rows}, Duration: {result.duration:.4f}s")
        if result.data:
            logger.info("Results:")
            for row in result.data:
                if isinstance(row, (dict, list)):
                    print(json.dumps(row, indent=2, ensure_ascii=False, default=json_serializer))
                else:
                    print(row)
        else:
            logger.info("No data returned.")
    else:
        logger.info("Query executed, but no result object returned.")


def execute_query(args, factory) -> int:
    """Run the query in a fresh context; returns the process exit code."""
    try:
        context = factory.create_context(args.sensitive_data_logging)
    except ConfigurationError as e:
        logger.error(f"Invalid MySQL configuration: {e}")
        return 1

    try:
        result = context.execute(args.query)
        handle_result(result)
        return 0
    except ConnectionError as e:
        logger.error(f"Database connection error: {e}")
        return 1
    except QueryError as e:
        logger.error(f"Database query error: {e}")
        return 1
    except DatabaseError as e:
        logger.error(f"Database error: {type(e).__name__}: {e}")
        return 1
    except Exception as e:
        logger.error(f"An unexpected error occurred during execution: {e}", exc_info=True)
        return 1
    finally:
        context.close()


def build_factory(args) -> QueryContextFactory:
    if args.connection_string:
        connection_builder = StaticConnectionBuilder(args.connection_string)
    else:
        connection_builder = SettingsConnectionBuilder(config_path=args.config)
    return QueryContextFactory(connection_builder, LoggingObserver())


def main(argv=None):
    args = parse_args(argv)

    # Set logging level
    numeric_level = getattr(logging, args.log_level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f'Invalid log level: {args.log_level}')
    logging.getLogger().setLevel(numeric_level)

    sys.exit(execute_query(args, build_factory(args)))


if __name__ == "__main__":
    main()

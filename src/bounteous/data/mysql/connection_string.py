# src/bounteous/data/mysql/connection_string.py
"""MySQL connection strings.

Translates ``Server=...;Database=...;Uid=...;Pwd=...;`` style connection
strings, using the keyword names of MySQL Connector/NET, into keyword
arguments for :class:`MySQLConnectionConfig`.
"""

from typing import Any, Dict

from bounteous.data.connection import parse_connection_string
from bounteous.data.errors import ConfigurationError

DEFAULT_HOST = 'localhost'
DEFAULT_PORT = 3306
DEFAULT_CHARSET = 'utf8mb4'

# Normalized keyword -> config field
KEYWORD_ALIASES: Dict[str, str] = {
    'server': 'host',
    'host': 'host',
    'data source': 'host',
    'datasource': 'host',
    'address': 'host',
    'addr': 'host',
    'network address': 'host',
    'port': 'port',
    'database': 'database',
    'initial catalog': 'database',
    'user id': 'username',
    'userid': 'username',
    'uid': 'username',
    'username': 'username',
    'user name': 'username',
    'user': 'username',
    'password': 'password',
    'pwd': 'password',
    'character set': 'charset',
    'charset': 'charset',
    'ssl mode': 'ssl_mode',
    'sslmode': 'ssl_mode',
    'ssl ca': 'ssl_ca',
    'sslca': 'ssl_ca',
    'ssl cert': 'ssl_cert',
    'sslcert': 'ssl_cert',
    'ssl key': 'ssl_key',
    'sslkey': 'ssl_key',
    'maximum pool size': 'pool_size',
    'max pool size': 'pool_size',
    'maxpoolsize': 'pool_size',
    'connection timeout': 'connect_timeout',
    'connect timeout': 'connect_timeout',
    'connectiontimeout': 'connect_timeout',
}

SSL_MODES: Dict[str, Dict[str, bool]] = {
    'none': {'ssl_disabled': True},
    'disabled': {'ssl_disabled': True},
    'preferred': {},
    'required': {'ssl_disabled': False},
    'verifyca': {'ssl_disabled': False, 'ssl_verify_cert': True},
    'verifyfull': {'ssl_disabled': False, 'ssl_verify_cert': True, 'ssl_verify_identity': True},
}


def normalize_keyword(keyword: str) -> str:
    """``SSL-Mode``, ``ssl_mode`` and ``Ssl  Mode`` all become ``ssl mode``"""
    return ' '.join(keyword.lower().replace('_', ' ').replace('-', ' ').split())


def _to_int(keyword: str, value: str, minimum: int = 0, maximum: int = None) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid value for '{keyword}': {value!r} is not an integer")
    if number < minimum or (maximum is not None and number > maximum):
        raise ConfigurationError(f"Invalid value for '{keyword}': {number} is out of range")
    return number


def ssl_params(ssl_mode: str) -> Dict[str, bool]:
    """Config flags for a Connector/NET ``SslMode`` value"""
    key = ssl_mode.lower().replace(' ', '').replace('_', '').replace('-', '')
    if key not in SSL_MODES:
        raise ConfigurationError(
            f"Unsupported SSL mode '{ssl_mode}'. "
            f"Expected one of: None, Disabled, Preferred, Required, VerifyCA, VerifyFull")
    return dict(SSL_MODES[key])


def parse_mysql_connection_string(connection_string: str) -> Dict[str, Any]:
    """
    Parse a MySQL connection string into config keyword arguments.

    Host, port and charset default to ``localhost``, 3306 and ``utf8mb4``.
    Keywords without a config field, and ``connect_timeout``, end up in the
    ``options`` dictionary.

    Raises:
        ConfigurationError: Malformed string, non-numeric or out-of-range
            port or pool size, or an unknown SSL mode.
    """
    pairs = parse_connection_string(connection_string)

    params: Dict[str, Any] = {
        'host': DEFAULT_HOST,
        'port': DEFAULT_PORT,
        'charset': DEFAULT_CHARSET,
    }
    options: Dict[str, Any] = {}

    for keyword, value in pairs.items():
        field_name = KEYWORD_ALIASES.get(normalize_keyword(keyword))
        if field_name is None:
            options[keyword] = value
        elif field_name == 'port':
            params['port'] = _to_int(keyword, value, minimum=1, maximum=65535)
        elif field_name == 'pool_size':
            params['pool_size'] = _to_int(keyword, value, minimum=1)
        elif field_name == 'connect_timeout':
            options['connect_timeout'] = _to_int(keyword, value)
        elif field_name == 'ssl_mode':
            params.update(ssl_params(value))
        else:
            params[field_name] = value

    if options:
        params['options'] = options
    return params

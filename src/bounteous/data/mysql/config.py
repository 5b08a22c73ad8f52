# src/bounteous/data/mysql/config.py
"""MySQL connection settings and where they come from.

Settings are loaded with a multi-level priority mechanism:

1. The file named by the ``BOUNTEOUS_MYSQL_CONFIG_PATH`` environment variable
2. An explicit file path, else ``config.toml``, ``config.yaml`` or
   ``config.yml`` in the working directory
3. ``MYSQL_*`` environment variables
4. Hard-coded defaults

Files may hold the settings at the top level or under a ``mysql`` section.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

try:
    import tomllib
except ImportError:
    import tomli as tomllib

from bounteous.data.connection import ConnectionBuilder
from bounteous.data.errors import ConfigurationError
from .connection_string import DEFAULT_CHARSET, DEFAULT_HOST, DEFAULT_PORT

logger = logging.getLogger('bounteous.data.mysql')

CONFIG_PATH_ENV = 'BOUNTEOUS_MYSQL_CONFIG_PATH'
DEFAULT_CONFIG_FILES = ('config.toml', 'config.yaml', 'config.yml')

# Environment variable -> settings field
ENVIRONMENT_VARIABLES = {
    'MYSQL_HOST': 'host',
    'MYSQL_PORT': 'port',
    'MYSQL_DATABASE': 'database',
    'MYSQL_USER': 'username',
    'MYSQL_PASSWORD': 'password',
    'MYSQL_CHARSET': 'charset',
    'MYSQL_SSL_MODE': 'ssl_mode',
}

_SPECIAL_CHARACTERS = (';', '=', '"', "'")


@dataclass
class MySQLConnectionSettings:
    """Discrete MySQL connection settings, renderable as a connection string."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    database: Optional[str] = None
    username: str = 'root'
    password: str = ''
    charset: str = DEFAULT_CHARSET
    ssl_mode: Optional[str] = None
    options: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MySQLConnectionSettings':
        """Build settings from a mapping; ``user`` is accepted for ``username``."""
        values = dict(data)
        if 'user' in values and 'username' not in values:
            values['username'] = values.pop('user')

        known = {name: values.pop(name) for name in list(values) if name in cls.__dataclass_fields__}
        options = dict(known.pop('options', None) or {})
        # Anything unrecognized is passed through as a connection-string option
        options.update(values)

        if 'port' in known:
            try:
                known['port'] = int(known['port'])
            except (TypeError, ValueError):
                raise ConfigurationError(f"Invalid MySQL port: {known['port']!r}")
        return cls(options=options, **known)

    def to_connection_string(self) -> str:
        parts = [
            ('Server', self.host),
            ('Port', self.port),
            ('Database', self.database),
            ('Uid', self.username),
            ('Pwd', self.password),
            ('CharSet', self.charset),
            ('SslMode', self.ssl_mode),
        ]
        parts.extend(self.options.items())

        return ''.join(f"{key}={_quote(value)};" for key, value in parts if value is not None)


def _quote(value: Any) -> str:
    text = str(value)
    if text != text.strip() or any(ch in text for ch in _SPECIAL_CHARACTERS):
        return '"' + text.replace('"', '""') + '"'
    return text


def load_yaml_config(file_path: Path) -> Dict[str, Any]:
    with open(file_path, 'r', encoding='utf-8') as f:
        config = yaml.safe_load(f) or {}
    logger.info(f"Loaded configuration from {file_path}")
    return config


def load_toml_config(file_path: Path) -> Dict[str, Any]:
    with open(file_path, 'rb') as f:
        config = tomllib.load(f) or {}
    logger.info(f"Loaded configuration from {file_path}")
    return config


def load_config_from_file(config_path: Path) -> Dict[str, Any]:
    """Load a TOML or YAML file, chosen by extension."""
    suffix = config_path.suffix.lower().strip()
    if suffix in ('.yaml', '.yml'):
        loader = load_yaml_config
    elif suffix == '.toml':
        loader = load_toml_config
    else:
        raise ConfigurationError(f"Unsupported configuration file format: {config_path.suffix}")

    try:
        config = loader(config_path)
    except (yaml.YAMLError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(f"Failed to parse configuration file {config_path}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Failed to read configuration file {config_path}: {e}") from e

    if not isinstance(config, dict):
        raise ConfigurationError(f"Configuration file {config_path} does not contain a mapping")
    return config


def _settings_from_file(config_path: Path) -> MySQLConnectionSettings:
    config = load_config_from_file(config_path)
    section = config.get('mysql', config)
    if not isinstance(section, dict):
        raise ConfigurationError(f"'mysql' section of {config_path} is not a mapping")
    return MySQLConnectionSettings.from_dict(section)


def load_connection_settings(config_path: Optional[Union[str, Path]] = None,
                             environ: Optional[Dict[str, str]] = None) -> MySQLConnectionSettings:
    """
    Load MySQL connection settings using the multi-level priority mechanism.

    Args:
        config_path: File consulted at level 2 instead of the default files
        environ: Environment mapping, ``os.environ`` by default

    Raises:
        ConfigurationError: A file named by the environment variable or by
            ``config_path`` does not exist, or a file cannot be understood
    """
    environ = os.environ if environ is None else environ

    # 1. Config file named by environment variable
    env_path = environ.get(CONFIG_PATH_ENV)
    if env_path:
        path = Path(env_path)
        if not path.exists():
            raise ConfigurationError(f"Configuration file {path} specified in {CONFIG_PATH_ENV} does not exist")
        logger.info(f"Using configuration file from environment variable: {path}")
        return _settings_from_file(path)

    # 2. Explicit or default config file
    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise ConfigurationError(f"Configuration file {path} does not exist")
        return _settings_from_file(path)

    for name in DEFAULT_CONFIG_FILES:
        path = Path.cwd() / name
        if path.exists():
            logger.info(f"Using default configuration file: {path}")
            return _settings_from_file(path)

    # 3. Environment variables
    values = {field_name: environ[var] for var, field_name in ENVIRONMENT_VARIABLES.items() if environ.get(var)}
    if values:
        logger.info("Using MySQL connection parameters from environment variables")
        return MySQLConnectionSettings.from_dict(values)

    # 4. Defaults
    logger.info("Using default MySQL connection settings")
    return MySQLConnectionSettings()


class SettingsConnectionBuilder(ConnectionBuilder):
    """Connection builder backed by :class:`MySQLConnectionSettings`, loaded lazily."""

    def __init__(self, settings: Optional[MySQLConnectionSettings] = None,
                 config_path: Optional[Union[str, Path]] = None):
        self._settings = settings
        self._config_path = config_path

    @property
    def settings(self) -> MySQLConnectionSettings:
        if self._settings is None:
            self._settings = load_connection_settings(self._config_path)
        return self._settings

    @property
    def admin_connection_string(self) -> str:
        return self.settings.to_connection_string()

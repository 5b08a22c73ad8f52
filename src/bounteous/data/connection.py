# src/bounteous/data/connection.py
"""Connection-string sources and the generic ``key=value;`` format.

A :class:`ConnectionBuilder` is the collaborator a context factory asks for
the connection string. Provider packages translate the parsed pairs into
their own connection configuration.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple

from .errors import ConfigurationError

PASSWORD_KEYS = frozenset({'password', 'pwd'})
MASK = '*****'
_QUOTES = ('"', "'")


class ConnectionBuilder(ABC):
    """Supplies connection strings to context factories."""

    @property
    @abstractmethod
    def admin_connection_string(self) -> str:
        """Connection string with enough privileges to manage the schema."""
        pass

    @property
    def connection_string(self) -> str:
        """Connection string for ordinary application traffic."""
        return self.admin_connection_string


class StaticConnectionBuilder(ConnectionBuilder):
    """Connection builder over literal connection strings"""

    def __init__(self, admin_connection_string: str, connection_string: Optional[str] = None):
        self._admin_connection_string = admin_connection_string
        self._connection_string = connection_string

    @property
    def admin_connection_string(self) -> str:
        return self._admin_connection_string

    @property
    def connection_string(self) -> str:
        if self._connection_string is None:
            return self._admin_connection_string
        return self._connection_string


def _split_segments(connection_string: str) -> List[str]:
    """Split on ``;`` outside of quoted values."""
    segments = []
    current = []
    quote = None
    i = 0
    length = len(connection_string)

    while i < length:
        ch = connection_string[i]
        if quote:
            current.append(ch)
            if ch == quote:
                if i + 1 < length and connection_string[i + 1] == quote:
                    # Doubled quote inside a quoted value
                    current.append(ch)
                    i += 2
                    continue
                quote = None
        elif ch in _QUOTES and ''.join(current).rstrip().endswith('='):
            quote = ch
            current.append(ch)
        elif ch == ';':
            segments.append(''.join(current))
            current = []
        else:
            current.append(ch)
        i += 1

    if quote:
        raise ConfigurationError("Unterminated quoted value in connection string")

    segments.append(''.join(current))
    return segments


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] in _QUOTES and value[-1] == value[0]:
        quote = value[0]
        return value[1:-1].replace(quote * 2, quote)
    return value


def _split_pair(segment: str) -> Tuple[str, str]:
    key, sep, value = segment.partition('=')
    if not sep or not key.strip():
        raise ConfigurationError(f"Malformed connection string segment: '{key.strip()}'")
    return key.strip(), value.strip()


def parse_connection_string(connection_string: str) -> Dict[str, str]:
    """
    Parse a ``key=value;`` connection string.

    Keys are trimmed and lower-cased, values are trimmed and unquoted. Empty
    segments are ignored and a key given twice keeps its last value.

    Raises:
        ConfigurationError: A segment has no ``=`` or a quote is left open.
    """
    if connection_string is None:
        raise ConfigurationError("Connection string must not be None")

    pairs: Dict[str, str] = {}
    for segment in _split_segments(connection_string):
        if not segment.strip():
            continue
        key, value = _split_pair(segment)
        pairs[key.lower()] = _unquote(value)
    return pairs


def mask_connection_string(connection_string: str) -> str:
    """Return the connection string with password values replaced."""
    if not connection_string:
        return connection_string

    try:
        segments = _split_segments(connection_string)
    except ConfigurationError:
        # Unparseable strings are hidden entirely
        return MASK

    masked = []
    for segment in segments:
        if segment.strip() and '=' in segment:
            key = segment.partition('=')[0]
            if key.strip().lower() in PASSWORD_KEYS:
                segment = f"{key}={MASK}"
        masked.append(segment)
    return ';'.join(masked)

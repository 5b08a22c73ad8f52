# src/bounteous/data/errors.py
"""Errors raised by the data-access layer itself.

Database failures are never wrapped here: whatever the ORM runtime or the
driver raises reaches the caller unchanged.
"""


class DataError(Exception):
    """Base class for errors raised by bounteous.data"""
    pass


class ConfigurationError(DataError, ValueError):
    """Context options or connection settings are missing or malformed"""
    pass


class ContextDisposedError(DataError, RuntimeError):
    """A context was used after it was closed"""
    pass

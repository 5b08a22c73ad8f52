"""Shared fixtures: fake backends and providers so no MySQL server is needed"""
import logging
from types import SimpleNamespace
from unittest.mock import MagicMock, PropertyMock

import pytest

from bounteous.data.connection import ConnectionBuilder
from bounteous.data.context import DbContext
from bounteous.data.observer import DbContextObserver
from bounteous.data.options import DbContextOptionsBuilder, ProviderExtension
from bounteous.data.retry import NonRetryingExecutionStrategy

logging.basicConfig(level=logging.INFO)

TEST_CONNECTION_STRING = "Server=localhost;Database=test;"


class FakeBackend:
    """Stands in for MySQLBackend; records calls and raises queued failures"""

    def __init__(self, connection_config=None, **kwargs):
        self.connection_config = connection_config
        self.connected = False
        self.calls = []
        self.failures = []
        self.disconnect_calls = 0

    def _record(self, name, *args):
        self.calls.append((name,) + args)
        if self.failures:
            raise self.failures.pop(0)

    def connect(self):
        self._record('connect')
        self.connected = True

    def disconnect(self):
        self.disconnect_calls += 1
        self.connected = False

    def ping(self, reconnect=True):
        self._record('ping', reconnect)
        return self.connected

    def execute(self, sql, params=None):
        self._record('execute', sql, params)
        return SimpleNamespace(affected_rows=1, duration=0.001, data=[{'id': 1}])

    def fetch_one(self, sql, params=None):
        self._record('fetch_one', sql, params)
        return {'id': 1}

    def fetch_all(self, sql, params=None):
        self._record('fetch_all', sql, params)
        return [{'id': 1}, {'id': 2}]


class FakeProvider(ProviderExtension):
    name = 'Fake'

    def __init__(self, connection_string="Server=localhost;Pwd=secret;", strategy=None):
        self._connection_string = connection_string
        self._strategy = strategy
        self.backends = []

    @property
    def connection_string(self):
        return self._connection_string

    @property
    def connection_config(self):
        return {'connection_string': self._connection_string}

    @property
    def backend_class(self):
        return FakeBackend

    def create_backend(self):
        backend = super().create_backend()
        self.backends.append(backend)
        return backend

    def create_execution_strategy(self):
        return self._strategy or NonRetryingExecutionStrategy()


class EmptyContext(DbContext):
    def register_models(self, model_builder):
        pass


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def fake_options(fake_provider):
    return DbContextOptionsBuilder().use_provider(fake_provider).options


@pytest.fixture
def mock_observer():
    return MagicMock(spec=DbContextObserver)


@pytest.fixture
def mock_connection_builder():
    """Connection builder whose admin connection string is a PropertyMock"""
    builder = MagicMock(spec=ConnectionBuilder)
    admin = PropertyMock(return_value=TEST_CONNECTION_STRING)
    type(builder).admin_connection_string = admin
    builder.admin_property = admin
    return builder

"""Tests for the generic context factory"""
from unittest.mock import MagicMock

import pytest

from bounteous.data.factory import DbContextFactory
from bounteous.data.options import DbContextOptionsBuilder
from conftest import EmptyContext, FakeProvider


class FakeContextFactory(DbContextFactory[EmptyContext]):
    def __init__(self, connection_builder, observer):
        super().__init__(connection_builder, observer)
        self.applied = []

    def _apply_options(self, sensitive_data_logging_enabled=False):
        self.applied.append(sensitive_data_logging_enabled)
        provider = FakeProvider(self.connection_builder.admin_connection_string)
        return (DbContextOptionsBuilder().use_provider(provider)
                .enable_sensitive_data_logging(sensitive_data_logging_enabled).options)

    def _create(self, options, observer):
        return EmptyContext(options, observer)


def test_factory_is_abstract(mock_connection_builder, mock_observer):
    with pytest.raises(TypeError):
        DbContextFactory(mock_connection_builder, mock_observer)


def test_create_context_applies_options_and_observer(mock_connection_builder, mock_observer):
    factory = FakeContextFactory(mock_connection_builder, mock_observer)

    context = factory.create_context(sensitive_data_logging_enabled=True)

    assert isinstance(context, EmptyContext)
    assert factory.applied == [True]
    assert context.options.sensitive_data_logging is True
    assert context.observer is mock_observer
    assert context.provider.connection_string == "Server=localhost;Database=test;"


def test_create_context_defaults_to_no_sensitive_logging(mock_connection_builder, mock_observer):
    factory = FakeContextFactory(mock_connection_builder, mock_observer)
    assert factory.create_context().options.sensitive_data_logging is False


def test_each_call_builds_new_options_and_context(mock_connection_builder, mock_observer):
    factory = FakeContextFactory(mock_connection_builder, mock_observer)

    first = factory.create_context()
    second = factory.create_context()

    assert first is not second
    assert first.options is not second.options
    assert mock_connection_builder.admin_property.call_count == 2

"""Tests for MySQL transient-error detection"""
from unittest.mock import MagicMock

import pytest
from mysql.connector import errors as mysql_errors
from rhosocial.activerecord.backend.errors import (
    ConnectionError as BackendConnectionError,
    DeadlockError,
    IntegrityError,
)

from bounteous.data.mysql.retry import TRANSIENT_ERROR_NUMBERS, MySQLRetryingExecutionStrategy, error_chain
from bounteous.data.retry import RetryOptions


def wrapped(driver_error, backend_error_class, message="backend failure"):
    """Raise backend_error_class while handling driver_error, the way the backend does"""
    try:
        try:
            raise driver_error
        except mysql_errors.Error:
            raise backend_error_class(message)
    except backend_error_class as e:
        return e


@pytest.fixture
def strategy():
    return MySQLRetryingExecutionStrategy(RetryOptions(max_retry_count=2), sleep=lambda _: None)


def test_transient_numbers():
    assert {1213, 1205, 1040, 2002, 2003, 2006, 2013} <= TRANSIENT_ERROR_NUMBERS
    assert 1045 not in TRANSIENT_ERROR_NUMBERS
    assert 1062 not in TRANSIENT_ERROR_NUMBERS


@pytest.mark.parametrize("errno", [1213, 1205, 2006, 2013])
def test_driver_errors_with_transient_numbers(strategy, errno):
    assert strategy.should_retry_on(mysql_errors.OperationalError(msg="transient", errno=errno))


def test_driver_error_with_permanent_number(strategy):
    assert not strategy.should_retry_on(mysql_errors.IntegrityError(msg="Duplicate entry", errno=1062))


def test_wrapped_lost_connection_is_transient(strategy):
    error = wrapped(mysql_errors.OperationalError(msg="Lost connection", errno=2013), BackendConnectionError)
    assert strategy.should_retry_on(error)


def test_wrapped_access_denied_is_not_transient(strategy):
    error = wrapped(mysql_errors.ProgrammingError(msg="Access denied", errno=1045), BackendConnectionError)
    assert not strategy.should_retry_on(error)


def test_backend_errors_without_driver_cause(strategy):
    assert strategy.should_retry_on(BackendConnectionError("cannot connect"))
    assert strategy.should_retry_on(DeadlockError("deadlock"))
    assert not strategy.should_retry_on(IntegrityError("duplicate"))


def test_socket_level_errors_are_transient(strategy):
    assert strategy.should_retry_on(ConnectionRefusedError())
    assert strategy.should_retry_on(TimeoutError())
    assert not strategy.should_retry_on(ValueError())


def test_error_numbers_to_add():
    strategy = MySQLRetryingExecutionStrategy(RetryOptions(error_numbers_to_add=frozenset({1062})))
    assert strategy.should_retry_on(mysql_errors.IntegrityError(msg="Duplicate entry", errno=1062))


def test_error_chain_follows_cause_and_context():
    driver_error = mysql_errors.OperationalError(msg="gone", errno=2006)
    error = wrapped(driver_error, BackendConnectionError)
    chain = list(error_chain(error))
    assert chain[0] is error
    assert chain[1] is driver_error


def test_error_chain_stops_on_cycles():
    first = RuntimeError("a")
    second = RuntimeError("b")
    first.__context__ = second
    second.__context__ = first
    assert list(error_chain(first)) == [first, second]


def test_execute_retries_deadlocks_then_succeeds(strategy):
    operation = MagicMock(side_effect=[DeadlockError("deadlock"), "done"])
    assert strategy.execute(operation) == "done"
    assert operation.call_count == 2


def test_execute_gives_up_after_max_retries(strategy):
    errors = [wrapped(mysql_errors.OperationalError(msg="gone", errno=2006), BackendConnectionError)
              for _ in range(3)]
    operation = MagicMock(side_effect=errors)

    with pytest.raises(BackendConnectionError) as exc_info:
        strategy.execute(operation)

    assert exc_info.value is errors[-1]
    assert operation.call_count == 3

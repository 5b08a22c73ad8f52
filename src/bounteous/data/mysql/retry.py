# src/bounteous/data/mysql/retry.py
"""Retry-on-failure for MySQL"""

from typing import FrozenSet, Iterator

from mysql.connector import errorcode
from mysql.connector.errors import Error as MySQLError
from rhosocial.activerecord.backend.errors import (
    ConnectionError as BackendConnectionError,
    DeadlockError,
)

from bounteous.data.retry import RetryingExecutionStrategy

TRANSIENT_ERROR_NUMBERS: FrozenSet[int] = frozenset({
    errorcode.ER_LOCK_DEADLOCK,
    errorcode.ER_LOCK_WAIT_TIMEOUT,
    errorcode.ER_CON_COUNT_ERROR,
    errorcode.ER_TOO_MANY_USER_CONNECTIONS,
    errorcode.ER_SERVER_SHUTDOWN,
    errorcode.ER_QUERY_INTERRUPTED,
    errorcode.CR_CONNECTION_ERROR,
    errorcode.CR_CONN_HOST_ERROR,
    errorcode.CR_SERVER_GONE_ERROR,
    errorcode.CR_SERVER_LOST,
    errorcode.CR_SERVER_LOST_EXTENDED,
})


def error_chain(error: BaseException) -> Iterator[BaseException]:
    """Yield ``error`` and the exceptions it was raised from or during."""
    seen = set()
    while error is not None and id(error) not in seen:
        seen.add(id(error))
        yield error
        error = error.__cause__ or error.__context__


class MySQLRetryingExecutionStrategy(RetryingExecutionStrategy):
    """
    Retries on transient MySQL failures.

    The backend re-raises driver errors as its own error types, so the
    whole exception chain is inspected. When a driver error number is
    present it decides; otherwise backend connection and deadlock errors
    and socket-level connection errors count as transient.
    """

    @property
    def transient_error_numbers(self) -> FrozenSet[int]:
        return TRANSIENT_ERROR_NUMBERS | frozenset(self.options.error_numbers_to_add)

    def should_retry_on(self, error: Exception) -> bool:
        chain = list(error_chain(error))

        error_numbers = [e.errno for e in chain if isinstance(e, MySQLError) and isinstance(e.errno, int)]
        if error_numbers:
            transient = self.transient_error_numbers
            return any(number in transient for number in error_numbers)

        return any(isinstance(e, (BackendConnectionError, DeadlockError, ConnectionError, TimeoutError))
                   for e in chain)

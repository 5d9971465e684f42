from collections import defaultdict
from contextlib import contextmanager
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock, Mock

import pytest
from psycopg import errors
from psycopg.pq import TransactionStatus

from txdb import Database, RetryPolicy, TransactionExecutor
from txdb.interface import postgres


class ConflictError(Exception):
    """Driver-agnostic stand-in for a serialization failure"""

    sqlstate = "40001"


class ConnectionMock:
    def __init__(self):
        self.result: List[Dict[str, Any]] = [{"foo": "bar"}]
        self.rowcount = 1
        self.failures: Dict[str, List[Optional[Exception]]] = defaultdict(list)
        self.statements: List[str] = []
        self.info = Mock(transaction_status=TransactionStatus.INTRANS)

    def fail(self, statement: str, *exceptions: Optional[Exception]) -> None:
        """Make the next executions of `statement` raise, in order. A
        `None` lets that execution through"""
        self.failures[statement].extend(exceptions)

    def _execute(self, query: str, params: Optional[List[Any]] = None):
        self.statements.append(query)
        if self.failures[query]:
            failure = self.failures[query].pop(0)
            if failure is not None:
                raise failure
        if query.startswith("BEGIN"):
            self.info.transaction_status = TransactionStatus.INTRANS
        elif query in ("COMMIT", "ROLLBACK"):
            self.info.transaction_status = TransactionStatus.IDLE
        cursor = MagicMock()
        cursor.fetchone.return_value = self.result[0] if self.result else None
        cursor.fetchall.return_value = self.result
        cursor.rowcount = self.rowcount
        return cursor

    def count(self, statement: str) -> int:
        return sum(1 for s in self.statements if s.startswith(statement))

    def abort(self) -> None:
        """Put the transaction in the failed state, as after an error the
        caller caught"""
        self.info.transaction_status = TransactionStatus.INERROR


class PoolMock:
    def __init__(self, connection: ConnectionMock):
        self._conn = connection
        self.acquired = 0
        self.released = 0
        self.timeouts: List[Optional[float]] = []
        self.open = Mock()
        self.close = Mock()
        self.stats = Mock(return_value={"pool_size": 1, "pool_available": 1})

    @property
    def in_use(self) -> int:
        return self.acquired - self.released

    @contextmanager
    def connection(self, timeout: Optional[float] = None):
        self.acquired += 1
        self.timeouts.append(timeout)
        try:
            yield self._conn
        finally:
            self.released += 1


@pytest.fixture
def connection():
    conn = ConnectionMock()
    conn.execute = Mock(side_effect=conn._execute)
    return conn


@pytest.fixture
def pool(connection):
    return PoolMock(connection)


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def policy():
    return RetryPolicy(max_attempts=3, backoff_unit=0.01)


@pytest.fixture
def executor(pool, policy, sleeps):
    return TransactionExecutor(pool, policy, sleep=sleeps.append)


@pytest.fixture
def database(pool, executor):
    return Database(pool, executor=executor)


@pytest.fixture
def conflict():
    return errors.SerializationFailure("could not serialize access")


@pytest.fixture
def mock_connection_pool(monkeypatch):
    instance = MagicMock()
    mock = MagicMock(return_value=instance)
    monkeypatch.setattr(postgres, "ConnectionPool", mock)
    return mock

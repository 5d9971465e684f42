from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from psycopg import Connection
from psycopg_pool import ConnectionPool

from .base import BaseInterface


class PostgresPool(BaseInterface):
    """Interface for connecting to a Postgres database

    Connections are opened in autocommit mode: transactions are started and
    ended with explicit `BEGIN`, `COMMIT` and `ROLLBACK` statements by the
    `TransactionExecutor`, and statements issued outside of one are
    committed immediately.
    """

    def _setup_pool(self):
        self._pool = ConnectionPool(
            self.full_dsn,
            min_size=self.min_size,
            max_size=self.max_size,
            kwargs={"autocommit": True},
            open=False,
        )

    def open(self):
        """Open connections to the pool"""
        self._pool.open()

    def close(self):
        """Close connections to the pool"""
        self._pool.close()

    @contextmanager
    def connection(
        self, timeout: Optional[float] = None
    ) -> Iterator[Connection]:
        """Obtain a connection to the database

        The connection goes back to the pool when the block exits.

        Args:
            timeout (float, optional): Time before an error is raised on
                failure to obtain a connection. Defaults to `None`, which
                uses the pool default.

        Yields:
            Iterator[Connection]: A database connection
        """
        with self._pool.connection(timeout=timeout) as conn:
            yield conn

    def stats(self) -> Dict[str, int]:
        """Snapshot of the pool statistics, e.g. `pool_size`,
        `pool_available` and `requests_waiting`"""
        return dict(self._pool.get_stats())

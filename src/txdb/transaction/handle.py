from __future__ import annotations

from typing import Any, Dict, List, Optional, Type

from psycopg.pq import TransactionStatus
from psycopg.rows import dict_row

from txdb.context import Context, background
from txdb.decorator import instrumented
from txdb.exception import RecordNotFound
from txdb.hydrator import Hydrator
from txdb.log import Logger
from txdb.log import logger as default_logger

from .interfaces import TransactionAborted, TransactionError


class Transaction:
    """A live database transaction bound to one pooled connection.

    Handed to the function run by `TransactionExecutor.execute`. It is only
    usable between the `BEGIN` issued by the executor and the terminating
    `COMMIT` or `ROLLBACK`; afterwards every call raises `TransactionError`.
    """

    hydrator = Hydrator()

    def __init__(
        self,
        connection: Any,
        logger: Logger = default_logger,
        context: Optional[Context] = None,
    ) -> None:
        self._connection = connection
        self.logger = logger
        self.context = context or background()
        self._finished = False
        self._committed = False
        self._rolled_back = False

    def __repr__(self) -> str:
        if self._committed:
            status = "committed"
        elif self._rolled_back:
            status = "rolled back"
        elif self._finished:
            status = "failed"
        else:
            status = "active"
        return f"<Transaction ({status})>"

    @property
    def is_active(self) -> bool:
        return not self._finished

    @property
    def is_committed(self) -> bool:
        return self._committed

    @property
    def is_rolled_back(self) -> bool:
        return self._rolled_back

    def _check(self) -> None:
        if not self.is_active:
            raise TransactionError("Transaction already finalized")
        self.context.raise_if_done()

    def _run(self, query: str, args: tuple):
        self._check()
        return self._connection.execute(query, list(args) if args else None)

    @instrumented("get")
    def get(
        self, query: str, *args: Any, model: Optional[Type[Any]] = None
    ) -> Any:
        """Fetch exactly one row

        Args:
            query (str): The query, using `%s` placeholders
            args (Any): Positional query arguments
            model (Type[Any], optional): Model the row is hydrated into.
                Defaults to `None`, which returns a `dict`.

        Raises:
            RecordNotFound: If the query returned no row

        Returns:
            Any: The row
        """
        cursor = self._run(query, args)
        cursor.row_factory = dict_row
        row = cursor.fetchone()
        if row is None:
            raise RecordNotFound(
                f"Query did not find any record using {args}"
            )
        return self.hydrator.hydrate(row, model=model)

    @instrumented("select")
    def select(self, query: str, *args: Any) -> List[Dict[str, Any]]:
        cursor = self._run(query, args)
        cursor.row_factory = dict_row
        return cursor.fetchall()

    @instrumented("exec")
    def exec(self, query: str, *args: Any) -> int:
        cursor = self._run(query, args)
        return cursor.rowcount

    @property
    def is_aborted(self) -> bool:
        """Whether a statement failed and the database discards everything
        up to the end of the transaction"""
        status = self._connection.info.transaction_status
        return status == TransactionStatus.INERROR

    def commit(self) -> None:
        """Commit the transaction. Called by the executor only

        Raises:
            TransactionAborted: If a failed statement aborted the
                transaction. It is rolled back instead.
        """
        if not self.is_active:
            raise TransactionError("Transaction already finalized")
        if self.is_aborted:
            # COMMIT would silently roll back
            self.rollback()
            raise TransactionAborted(
                "Transaction aborted by an earlier error, rolled back"
            )
        # Even a failed COMMIT ends the transaction server side
        self._finished = True
        self._connection.execute("COMMIT")
        self._committed = True

    def rollback(self) -> None:
        """Rollback the transaction. Called by the executor only"""
        if not self.is_active:
            raise TransactionError("Transaction already finalized")
        self._finished = True
        self._connection.execute("ROLLBACK")
        self._rolled_back = True

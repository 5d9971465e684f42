from __future__ import annotations

import threading
import time
from collections import defaultdict
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    DefaultDict,
    Dict,
    Optional,
    TypeVar,
)

from .classifier import is_serialization_error
from .handle import Transaction
from .interfaces import SerializationError
from .options import RetryPolicy, TransactionOptions

if TYPE_CHECKING:
    from txdb.interface.postgres import PostgresPool

T = TypeVar("T")
TxFunc = Callable[[Transaction], T]


class TransactionExecutor:
    """Runs functions inside a database transaction, retrying the whole
    function when the database aborts it on a serialization conflict.

    Every attempt borrows its own connection from the pool and gives it
    back once the transaction has been committed or rolled back, so no
    connection is held while waiting to retry.

    Because of the retries, the function may be called several times and
    must not have side effects outside of the transaction that are unsafe
    to repeat.

    Example:

    ```python
    executor = TransactionExecutor(pool, RetryPolicy(max_attempts=5))

    def transfer(tx: Transaction) -> int:
        tx.exec("UPDATE accounts SET balance = balance - %s WHERE id = %s", 10, 1)
        return tx.exec("UPDATE accounts SET balance = balance + %s WHERE id = %s", 10, 2)

    executor.execute(transfer)
    ```
    """

    def __init__(
        self,
        pool: PostgresPool,
        policy: Optional[RetryPolicy] = None,
        classifier: Callable[[BaseException], bool] = is_serialization_error,
        sleep: Callable[[float], Any] = time.sleep,
    ) -> None:
        """
        Args:
            pool (PostgresPool): Source of connections, one per attempt
            policy (RetryPolicy, optional): Attempts and backoff. Defaults
                to `None`, meaning `RetryPolicy()`.
            classifier (Callable[[BaseException], bool], optional): Whether
                an exception is a retryable conflict. Defaults to
                `is_serialization_error`.
            sleep (Callable[[float], Any], optional): Blocking wait used
                between attempts. Defaults to `time.sleep`.
        """
        self.pool = pool
        self.policy = policy or RetryPolicy()
        self.classifier = classifier
        self._sleep = sleep
        self._lock = threading.Lock()
        self._counter: DefaultDict[str, int] = defaultdict(int)

    def copy(self) -> TransactionExecutor:
        """A new executor on the same pool, policy, classifier and sleep,
        with its own counters"""
        return self.__class__(
            self.pool,
            self.policy,
            classifier=self.classifier,
            sleep=self._sleep,
        )

    def reset(self) -> None:
        with self._lock:
            self._counter.clear()

    @property
    def counters(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._counter)

    def _count(self, key: str) -> None:
        with self._lock:
            self._counter[key] += 1

    def execute(
        self, fn: TxFunc[T], options: Optional[TransactionOptions] = None
    ) -> T:
        """Run `fn` in a transaction and commit it

        Args:
            fn (Callable[[Transaction], T]): The transactional work
            options (TransactionOptions, optional): Isolation, read only
                flag, logger and context. Defaults to `None`, meaning
                `TransactionOptions()`.

        Raises:
            SerializationError: If every attempt failed on a conflict
            Cancelled: If the context was cancelled or expired between
                attempts
            TransactionAborted: If `fn` returned after a statement had
                failed inside the transaction

        Returns:
            T: Whatever `fn` returned on the attempt that committed
        """
        options = options or TransactionOptions()
        ctx = options.context
        logger = options.logger
        last_conflict: Optional[BaseException] = None

        attempt = 0
        while attempt < self.policy.max_attempts:
            ctx.raise_if_done()
            if attempt > 0:
                delay = self.policy.delay(attempt)
                self._count("retries")
                logger.warning(
                    "retrying transaction due to serialization error",
                    extra={"attempt": attempt, "sleep_interval": delay},
                )
                self._sleep(delay)
                ctx.raise_if_done()

            self._count("attempts")
            with self.pool.connection(timeout=ctx.remaining()) as conn:
                tx = self._begin(conn, options)
                try:
                    result = fn(tx)
                except Exception as e:
                    tx.rollback()
                    self._count("rollbacks")
                    if not self.classifier(e):
                        raise
                    last_conflict = e
                    attempt += 1
                    continue

                try:
                    tx.commit()
                except Exception as e:
                    if tx.is_rolled_back:
                        self._count("rollbacks")
                    if not self.classifier(e):
                        raise
                    last_conflict = e
                    attempt += 1
                    continue

                self._count("commits")
                return result

        self._count("exhausted")
        logger.warning(
            "transaction failed after max attempts due to serialization error",
            extra={"attempt": attempt},
        )
        raise SerializationError(
            f"Transaction failed after {attempt} attempts due to "
            "serialization error"
        ) from last_conflict

    def _begin(self, conn: Any, options: TransactionOptions) -> Transaction:
        conn.execute(options.begin_sql)
        options.logger.debug(
            "transaction begun", extra={"statement": options.begin_sql}
        )
        return Transaction(conn, logger=options.logger, context=options.context)

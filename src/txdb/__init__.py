from importlib.metadata import version

from .capability import DatabaseLike, Introspector, Querier, Transactor
from .context import Context, background
from .database import Database
from .exception import Cancelled, DeadlineExceeded, RecordNotFound, TxdbError
from .interface import PostgresPool
from .log import discard_logger
from .transaction import (
    ErrorKind,
    IsolationLevel,
    RetryPolicy,
    SerializationError,
    Transaction,
    TransactionAborted,
    TransactionError,
    TransactionExecutor,
    TransactionOptions,
    classify,
    is_serialization_error,
    read_only,
    with_context,
    with_isolation,
    with_logger,
)

__version__ = version("txdb")

__all__ = (
    "background",
    "classify",
    "discard_logger",
    "is_serialization_error",
    "read_only",
    "with_context",
    "with_isolation",
    "with_logger",
    "Cancelled",
    "Context",
    "Database",
    "DatabaseLike",
    "DeadlineExceeded",
    "ErrorKind",
    "Introspector",
    "IsolationLevel",
    "PostgresPool",
    "Querier",
    "RecordNotFound",
    "RetryPolicy",
    "SerializationError",
    "Transaction",
    "TransactionAborted",
    "TransactionError",
    "TransactionExecutor",
    "TransactionOptions",
    "Transactor",
    "TxdbError",
)

"""
Transactions with transparent retry on serialization conflicts.
"""

from .classifier import ErrorKind, classify, is_serialization_error
from .executor import TransactionExecutor, TxFunc
from .handle import Transaction
from .interfaces import (
    IsolationLevel,
    SerializationError,
    TransactionAborted,
    TransactionError,
)
from .options import (
    RetryPolicy,
    TransactionOptions,
    TxOpt,
    read_only,
    with_context,
    with_isolation,
    with_logger,
)

__all__ = [
    "ErrorKind",
    "IsolationLevel",
    "RetryPolicy",
    "SerializationError",
    "Transaction",
    "TransactionAborted",
    "TransactionError",
    "TransactionExecutor",
    "TransactionOptions",
    "TxFunc",
    "TxOpt",
    "classify",
    "is_serialization_error",
    "read_only",
    "with_context",
    "with_isolation",
    "with_logger",
]

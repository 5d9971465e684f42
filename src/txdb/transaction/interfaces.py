from enum import Enum

from txdb.exception import TxdbError


class IsolationLevel(Enum):
    """SQL transaction isolation levels"""

    READ_UNCOMMITTED = "READ UNCOMMITTED"
    READ_COMMITTED = "READ COMMITTED"
    REPEATABLE_READ = "REPEATABLE READ"
    SERIALIZABLE = "SERIALIZABLE"


class TransactionError(TxdbError):
    """Base exception for transaction errors"""

    pass


class SerializationError(TransactionError):
    """Raised when a transaction kept failing on serialization conflicts
    until the retry policy was exhausted"""

    pass


class TransactionAborted(TransactionError):
    """Raised on commit when an earlier statement failed and the database
    already aborted the transaction, so nothing could be committed"""

    pass

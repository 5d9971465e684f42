from enum import Enum
from typing import Optional

SERIALIZATION_FAILURE = "40001"
DEADLOCK_DETECTED = "40P01"

CONFLICT_SQLSTATES = frozenset((SERIALIZATION_FAILURE, DEADLOCK_DETECTED))


class ErrorKind(Enum):
    NONE = "none"
    SERIALIZATION_CONFLICT = "serialization_conflict"
    OTHER = "other"


def is_serialization_error(exc: Optional[BaseException]) -> bool:
    """Whether the database aborted the transaction because of a
    serialization failure or a deadlock.

    The exception and its `__cause__` chain are inspected for a `sqlstate`
    attribute, which is how psycopg exposes the SQLSTATE code (e.g.
    `psycopg.errors.SerializationFailure`).
    """
    seen = set()
    while exc is not None and id(exc) not in seen:
        seen.add(id(exc))
        if getattr(exc, "sqlstate", None) in CONFLICT_SQLSTATES:
            return True
        exc = exc.__cause__
    return False


def classify(exc: Optional[BaseException]) -> ErrorKind:
    if exc is None:
        return ErrorKind.NONE
    if is_serialization_error(exc):
        return ErrorKind.SERIALIZATION_CONFLICT
    return ErrorKind.OTHER

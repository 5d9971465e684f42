from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Callable, Dict, Optional, Union

from txdb.context import Context, background
from txdb.log import Logger
from txdb.log import logger as default_logger

from .interfaces import IsolationLevel

SERIALIZATION_RETRY_MAX_ATTEMPTS = 10
SERIALIZATION_RETRY_START_INTERVAL = 1.0


@dataclass(frozen=True)
class RetryPolicy:
    """How many times a conflicting transaction is attempted, and how long
    to wait between attempts.

    The delay before attempt `i` (0-based) is `backoff_unit * i`, so the
    first attempt starts immediately.
    """

    max_attempts: int = SERIALIZATION_RETRY_MAX_ATTEMPTS
    backoff_unit: float = SERIALIZATION_RETRY_START_INTERVAL

    def __post_init__(self) -> None:
        if not isinstance(self.max_attempts, int) or self.max_attempts < 1:
            raise ValueError("max_attempts: must be an integer of at least 1")
        if self.backoff_unit < 0:
            raise ValueError("backoff_unit: must not be negative")

    def delay(self, attempt: int) -> float:
        return self.backoff_unit * attempt


@dataclass(frozen=True)
class TransactionOptions:
    isolation_level: IsolationLevel = IsolationLevel.SERIALIZABLE
    read_only: bool = False
    logger: Logger = default_logger
    context: Context = field(default_factory=background)

    @classmethod
    def build(
        cls,
        *opts: TxOpt,
        defaults: Optional[TransactionOptions] = None,
    ) -> TransactionOptions:
        """Apply option functions in order over the defaults

        Args:
            opts (TxOpt): Option functions, later ones win per field
            defaults (TransactionOptions, optional): Starting values.
                Defaults to `None`, meaning `TransactionOptions()`.

        Returns:
            TransactionOptions: The resolved options
        """
        changes: Dict[str, object] = {}
        for opt in opts:
            opt(changes)
        return replace(defaults or cls(), **changes)

    @property
    def begin_sql(self) -> str:
        sql = f"BEGIN ISOLATION LEVEL {self.isolation_level.value}"
        if self.read_only:
            sql += " READ ONLY"
        return sql


TxOpt = Callable[[Dict[str, object]], None]


def read_only() -> TxOpt:
    def opt(changes: Dict[str, object]) -> None:
        changes["read_only"] = True

    return opt


def with_isolation(level: Union[IsolationLevel, str]) -> TxOpt:
    level = IsolationLevel(level.upper()) if isinstance(level, str) else level

    def opt(changes: Dict[str, object]) -> None:
        changes["isolation_level"] = level

    return opt


def with_logger(logger: Logger) -> TxOpt:
    def opt(changes: Dict[str, object]) -> None:
        changes["logger"] = logger

    return opt


def with_context(ctx: Context) -> TxOpt:
    def opt(changes: Dict[str, object]) -> None:
        changes["context"] = ctx

    return opt

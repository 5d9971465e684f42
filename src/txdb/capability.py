"""Narrow views of the database facade.

Consumers should depend on the smallest protocol they need: something that
only runs transactional work takes a `Transactor`, not a whole `Database`.
"""

from __future__ import annotations

from typing import (
    Any,
    Dict,
    List,
    Optional,
    Protocol,
    Type,
    TypeVar,
    runtime_checkable,
)

from txdb.context import Context
from txdb.transaction import TxFunc, TxOpt

T = TypeVar("T")


@runtime_checkable
class Querier(Protocol):
    def get(
        self, query: str, *args: Any, model: Optional[Type[Any]] = None
    ) -> Any: ...

    def query(self, query: str, *args: Any) -> List[Dict[str, Any]]: ...

    def exec(self, query: str, *args: Any) -> int: ...


@runtime_checkable
class Transactor(Protocol):
    def execute(self, fn: TxFunc[T], *opts: TxOpt) -> T: ...


@runtime_checkable
class Introspector(Protocol):
    def metadata(self) -> Dict[str, str]: ...

    def stats(self) -> Dict[str, int]: ...


@runtime_checkable
class DatabaseLike(Querier, Transactor, Introspector, Protocol):
    def with_context(self, ctx: Context) -> DatabaseLike: ...

    def close(self) -> None: ...

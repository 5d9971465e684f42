from __future__ import annotations

import threading
import time
from typing import Any, Dict, Mapping, Optional

from txdb.exception import Cancelled, DeadlineExceeded


class Context:
    """Cooperative cancellation token carrying an optional deadline and a
    set of log fields.

    A context is shared by reference: cancelling it is observed by every
    operation that was handed the same instance. Derived contexts created
    with `with_fields` or `with_timeout` are cancelled together with their
    parent.

    Example:

    ```python
    ctx = Context.with_timeout(5.0, fields={"request_id": "abc"})
    db.with_context(ctx).execute(do_work)
    ```
    """

    def __init__(
        self,
        deadline: Optional[float] = None,
        fields: Optional[Mapping[str, Any]] = None,
        parent: Optional[Context] = None,
    ) -> None:
        """
        Args:
            deadline (float, optional): Absolute `time.monotonic()` value
                after which the context is expired. Defaults to `None`.
            fields (Mapping[str, Any], optional): Log fields bound to
                loggers derived from this context. Defaults to `None`.
            parent (Context, optional): Context whose cancellation is
                inherited. Defaults to `None`.
        """
        if parent is not None and parent.deadline is not None:
            deadline = (
                parent.deadline
                if deadline is None
                else min(deadline, parent.deadline)
            )
        self._deadline = deadline
        self._fields: Dict[str, Any] = {
            **(parent.fields if parent is not None else {}),
            **(fields or {}),
        }
        self._parent = parent
        self._cancelled = threading.Event()

    def __repr__(self) -> str:
        return (
            f"<Context deadline={self._deadline} "
            f"cancelled={self._cancelled.is_set()}>"
        )

    @classmethod
    def with_timeout(
        cls,
        timeout: float,
        fields: Optional[Mapping[str, Any]] = None,
        parent: Optional[Context] = None,
    ) -> Context:
        return cls(
            deadline=time.monotonic() + timeout, fields=fields, parent=parent
        )

    def with_fields(self, **fields: Any) -> Context:
        return Context(fields=fields, parent=self)

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline

    @property
    def fields(self) -> Dict[str, Any]:
        return dict(self._fields)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        if self._cancelled.is_set():
            return True
        return self._parent is not None and self._parent.cancelled

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, `None` when there is none"""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def error(self) -> Optional[Cancelled]:
        if self.cancelled:
            return Cancelled("context cancelled")
        if self._deadline is not None and time.monotonic() >= self._deadline:
            return DeadlineExceeded("context deadline exceeded")
        return None

    def raise_if_done(self) -> None:
        error = self.error()
        if error is not None:
            raise error


_BACKGROUND = Context()


def background() -> Context:
    """The root context: never cancelled, no deadline, no fields"""
    return _BACKGROUND

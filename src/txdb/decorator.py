from functools import wraps
from time import perf_counter
from typing import Any, Dict, Optional

from txdb.log import Logger

SLOW_QUERY_THRESHOLD = 0.1
"""Seconds a query primitive may take before its completion is logged"""


def report_finish(
    logger: Logger,
    fields: Dict[str, Any],
    start: float,
    error: Optional[BaseException] = None,
) -> None:
    """Log a "database done" record if the call that started at `start`
    took longer than `SLOW_QUERY_THRESHOLD`"""
    duration = perf_counter() - start
    if duration <= SLOW_QUERY_THRESHOLD:
        return
    extra = {**fields, "duration": duration}
    if error is not None:
        extra["error"] = error
    logger.info("database done", extra=extra)


def instrumented(kind: str):
    """Decorator measuring a query primitive and reporting slow calls.

    The decorated method must be defined on an object exposing a `logger`
    attribute and take the query text as first argument, followed by the
    query arguments.

    Example:

    ```python
    class Something:
        @instrumented("get")
        def get(self, query: str, *args: Any):
            ...
    ```

    Args:
        kind (str): Value of the `type` field of the log record
    """

    def decorator(f):
        @wraps(f)
        def wrapper(self, query: str, *args: Any, **kwargs: Any):
            fields = {"type": kind, "query": query, "query_args": args}
            start = perf_counter()
            try:
                result = f(self, query, *args, **kwargs)
            except Exception as e:
                report_finish(self.logger, fields, start, e)
                raise
            report_finish(self.logger, fields, start)
            return result

        return wrapper

    return decorator

from __future__ import annotations

import logging
from typing import Any, Mapping, MutableMapping, Tuple, Union

Logger = Union[logging.Logger, logging.LoggerAdapter]

logger = logging.getLogger("txdb")


class FieldsAdapter(logging.LoggerAdapter):
    """Logger adapter that binds a set of fields to every record.

    Unlike the stock `LoggerAdapter`, fields passed with `extra=` on a
    single call are merged over the bound ones instead of replacing them.
    """

    def __init__(self, logger: Logger, fields: Mapping[str, Any]) -> None:
        super().__init__(logger, dict(fields))

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs

    def with_fields(self, **fields: Any) -> FieldsAdapter:
        return FieldsAdapter(self.logger, {**self.extra, **fields})


def with_fields(base: Logger, fields: Mapping[str, Any]) -> Logger:
    if not fields:
        return base
    if isinstance(base, FieldsAdapter):
        return base.with_fields(**fields)
    return FieldsAdapter(base, fields)


def discard_logger() -> logging.Logger:
    """A logger that drops every record"""
    discard = logging.getLogger("txdb.discard")
    discard.disabled = True
    discard.propagate = False
    return discard

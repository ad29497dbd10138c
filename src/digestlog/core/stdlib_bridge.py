"""
Bridge from the standard library ``logging`` module into a digest sink.

``AggregatingHandler`` lets existing ``logging`` call sites feed a sink
without changes. Records from ``digestlog.*`` loggers are ignored so the
library's own diagnostics can never loop back into a digest.
"""

from __future__ import annotations

import logging
from typing import Any

from ..context import get_current_sink
from .levels import from_stdlib_level
from .sink import AggregatingSink

# Attributes present on every LogRecord; anything else came from ``extra=``
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime"}

_OWN_LOGGER_PREFIX = "digestlog"


def _extract_context(record: logging.LogRecord) -> dict[str, Any]:
    context: dict[str, Any] = {
        key: value
        for key, value in vars(record).items()
        if key not in _RESERVED_ATTRS and not key.startswith("_")
    }
    if record.exc_info and record.exc_info[0] is not None:
        exc_type, exc_value, _ = record.exc_info
        context["error.type"] = exc_type.__name__
        context["error.message"] = str(exc_value)
    return context


class AggregatingHandler(logging.Handler):
    """``logging.Handler`` that records into an ``AggregatingSink``.

    The logger name becomes the entry source and ``extra`` fields become the
    entry context. Filtering by severity is left to the sink's threshold.

    With ``sink=None`` each record goes to the sink bound to the current
    context (see ``digestlog.context.bind_sink``) and is ignored when no sink
    is bound. One root handler can then serve many concurrent requests.
    """

    def __init__(
        self, sink: AggregatingSink | None = None, level: int = logging.NOTSET
    ) -> None:
        super().__init__(level)
        self.sink = sink

    def emit(self, record: logging.LogRecord) -> None:
        if record.name == _OWN_LOGGER_PREFIX or record.name.startswith(
            _OWN_LOGGER_PREFIX + "."
        ):
            return
        sink = self.sink if self.sink is not None else get_current_sink()
        if sink is None:
            return
        try:
            sink.record(
                record.created,
                from_stdlib_level(record.levelno),
                record.getMessage(),
                record.name,
                _extract_context(record),
            )
        except Exception:
            self.handleError(record)

    def flush(self) -> None:
        # Digest delivery belongs to the end-of-work hook, not logging.flush
        return None


def enable_stdlib_bridge(
    sink: AggregatingSink | None = None,
    *,
    logger: logging.Logger | str | None = None,
    level: int = logging.NOTSET,
    remove_existing_handlers: bool = False,
) -> AggregatingHandler:
    """Attach an ``AggregatingHandler`` for ``sink`` to a stdlib logger.

    Args:
        sink: Target sink; None routes to the context-bound sink.
        logger: Logger or logger name to attach to (default: root logger).
        level: Handler level; records below it never reach the sink.
        remove_existing_handlers: Detach handlers already on the logger first.

    Returns:
        The installed handler, so callers can remove it later.
    """
    target = logger if isinstance(logger, logging.Logger) else logging.getLogger(logger)
    if remove_existing_handlers:
        for existing in list(target.handlers):
            target.removeHandler(existing)
    handler = AggregatingHandler(sink, level=level)
    target.addHandler(handler)
    if level != logging.NOTSET and (
        target.level == logging.NOTSET or target.level > level
    ):
        target.setLevel(level)
    return handler


def disable_stdlib_bridge(
    handler: AggregatingHandler,
    *,
    logger: logging.Logger | str | None = None,
) -> None:
    """Detach a handler installed by ``enable_stdlib_bridge``."""
    target = logger if isinstance(logger, logging.Logger) else logging.getLogger(logger)
    target.removeHandler(handler)


__all__ = [
    "AggregatingHandler",
    "disable_stdlib_bridge",
    "enable_stdlib_bridge",
]

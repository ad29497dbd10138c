"""Context-local sink binding.

Lets code deep inside a unit of work reach the sink for that unit of work
without passing it around, e.g. a request-scoped sink bound by the FastAPI
middleware. Bindings follow ``contextvars`` semantics, so concurrent requests
on one event loop each see their own sink.

Example:
    >>> with bind_sink(sink):
    ...     get_current_sink() is sink
    True
"""

from __future__ import annotations

import contextvars
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .core.sink import AggregatingSink

__all__ = ["bind_sink", "get_current_sink"]

_current_sink: contextvars.ContextVar[AggregatingSink | None] = contextvars.ContextVar(
    "digestlog_current_sink", default=None
)


def get_current_sink() -> AggregatingSink | None:
    """Return the sink bound to the current context, if any."""
    return _current_sink.get()


@contextmanager
def bind_sink(sink: AggregatingSink) -> Iterator[AggregatingSink]:
    """Bind ``sink`` as the current sink for the duration of the block."""
    token = _current_sink.set(sink)
    try:
        yield sink
    finally:
        _current_sink.reset(token)

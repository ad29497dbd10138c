"""
Request-scoped digests for FastAPI / ASGI applications.

Each HTTP request is one unit of work: ``DigestMiddleware`` builds a sink for
the request, binds it to the request context, and flushes it once after the
response has been sent, whether the endpoint succeeded or raised. The flush
runs in a worker thread so SMTP or HTTP delivery does not block the event
loop.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from typing import Any

from ..context import bind_sink, get_current_sink
from ..core.errors import ConfigurationError
from ..core.lifecycle import UnitOfWork
from ..core.sink import AggregatingSink

SinkFactory = Callable[[UnitOfWork], AggregatingSink]

Scope = dict[str, Any]
Receive = Callable[[], Any]
Send = Callable[[dict[str, Any]], Any]
ASGIApp = Callable[[Scope, Receive, Send], Any]


class DigestMiddleware:
    """Pure ASGI middleware creating one digest sink per HTTP request.

    Args:
        app: Wrapped ASGI application.
        sink_factory: Called with the request's ``UnitOfWork``; must return a
            sink registered with it (pass it as ``lifecycle=``).
        skip_paths: Path prefixes that get no sink (health checks, metrics).

    Example:
        >>> transport = digestlog.build_transport()
        >>> app.add_middleware(
        ...     DigestMiddleware,
        ...     sink_factory=lambda work: digestlog.get_sink(
        ...         lifecycle=work, transport=transport
        ...     ),
        ...     skip_paths=["/health"],
        ... )
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        sink_factory: SinkFactory,
        skip_paths: Sequence[str] = (),
    ) -> None:
        self.app = app
        self._sink_factory = sink_factory
        self._skip_paths = tuple(skip_paths)

    def _should_skip(self, scope: Scope) -> bool:
        path = str(scope.get("path", ""))
        return any(path.startswith(prefix) for prefix in self._skip_paths)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http" or self._should_skip(scope):
            await self.app(scope, receive, send)
            return

        method = scope.get("method", "HTTP")
        work = UnitOfWork(name=f"{method} {scope.get('path', '')}")
        sink = self._sink_factory(work)
        state = scope.setdefault("state", {})
        state["digest_sink"] = sink
        try:
            with bind_sink(sink):
                await self.app(scope, receive, send)
        finally:
            await asyncio.to_thread(work.complete)


def get_request_sink() -> AggregatingSink:
    """FastAPI dependency returning the current request's sink.

    Raises:
        ConfigurationError: If ``DigestMiddleware`` is not installed.

    Example:
        >>> @app.get("/orders")
        ... async def orders(sink: AggregatingSink = Depends(get_request_sink)):
        ...     sink.record(time.time(), "error", "inventory out of sync", "orders")
    """
    sink = get_current_sink()
    if sink is None:
        raise ConfigurationError(
            "No digest sink bound to this request; is DigestMiddleware installed?"
        )
    return sink


__all__ = ["DigestMiddleware", "SinkFactory", "get_request_sink"]

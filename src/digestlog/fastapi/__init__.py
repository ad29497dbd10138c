"""FastAPI / ASGI integration: one digest per HTTP request."""

from .integration import DigestMiddleware, SinkFactory, get_request_sink

__all__ = ["DigestMiddleware", "SinkFactory", "get_request_sink"]

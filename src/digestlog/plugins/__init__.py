"""
digestlog plugins.

Transports deliver composed digests. Built-in transports are registered on
import; others can be provided through the ``digestlog.transports`` entry
point group.
"""

from .loader import (
    PluginNotFoundError,
    get_transport_metadata,
    list_transports,
    load_transport,
    register_builtin,
    resolve_transport,
)
from .transports import (
    MemoryTransport,
    SmtpTransport,
    SmtpTransportConfig,
    WebhookTransport,
    WebhookTransportConfig,
)

__all__ = [
    "MemoryTransport",
    "PluginNotFoundError",
    "SmtpTransport",
    "SmtpTransportConfig",
    "WebhookTransport",
    "WebhookTransportConfig",
    "get_transport_metadata",
    "list_transports",
    "load_transport",
    "register_builtin",
    "resolve_transport",
]

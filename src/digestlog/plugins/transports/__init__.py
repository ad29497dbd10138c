from __future__ import annotations

from ...core.protocols import SendCapability
from ..loader import register_builtin
from ..utils import get_plugin_name
from .memory import MemoryTransport, SentMessage
from .smtp import SmtpTransport, SmtpTransportConfig
from .webhook import WebhookTransport, WebhookTransportConfig

for _cls, _aliases in (
    (SmtpTransport, ["email", "mail"]),
    (WebhookTransport, ["http"]),
    (MemoryTransport, []),
):
    register_builtin(get_plugin_name(_cls), _cls, aliases=_aliases)

__all__ = [
    "MemoryTransport",
    "SendCapability",
    "SentMessage",
    "SmtpTransport",
    "SmtpTransportConfig",
    "WebhookTransport",
    "WebhookTransportConfig",
]

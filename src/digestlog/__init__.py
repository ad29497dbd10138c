"""
Public entrypoints for digestlog.

digestlog buffers high-severity log entries during one unit of work (a
request, a job, a process run) and sends a single digest when it ends.
``get_sink()`` gives a zero-config sink wired from environment settings.
"""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import ValidationError as _ValidationError

from ._version import __version__
from .core.composer import compose_body, compose_message, compose_subject
from .core.entry import LogEntry
from .core.errors import (
    ConfigurationError,
    DigestlogError,
    ErrorCategory,
    UnknownLevelError,
)
from .core.levels import (
    LevelLike,
    Severity,
    get_all_levels,
    get_level_name,
    get_level_priority,
    parse_severity,
)
from .core.lifecycle import AtexitRegistrar, UnitOfWork, get_process_registrar
from .core.protocols import (
    DefaultRecipientProvider,
    LifecycleRegistrar,
    SendCapability,
    SiteIdentity,
)
from .core.settings import Settings
from .core.sink import AggregatingSink
from .core.site import SettingsSiteIdentity, StaticSiteIdentity
from .core.stdlib_bridge import AggregatingHandler, enable_stdlib_bridge
from .plugins import (
    MemoryTransport,
    SmtpTransport,
    SmtpTransportConfig,
    WebhookTransport,
    WebhookTransportConfig,
    load_transport,
)

VERSION = __version__

__all__ = [
    "__version__",
    "VERSION",
    # Entry points
    "get_sink",
    "build_transport",
    # Core
    "AggregatingSink",
    "LogEntry",
    "Severity",
    "Settings",
    "get_all_levels",
    "get_level_name",
    "get_level_priority",
    "parse_severity",
    # Composition
    "compose_body",
    "compose_message",
    "compose_subject",
    # Lifecycle
    "AtexitRegistrar",
    "UnitOfWork",
    "get_process_registrar",
    # Capabilities
    "DefaultRecipientProvider",
    "LifecycleRegistrar",
    "SendCapability",
    "SettingsSiteIdentity",
    "SiteIdentity",
    "StaticSiteIdentity",
    # Transports
    "MemoryTransport",
    "SmtpTransport",
    "SmtpTransportConfig",
    "WebhookTransport",
    "WebhookTransportConfig",
    # stdlib logging
    "AggregatingHandler",
    "enable_stdlib_bridge",
    # Errors
    "ConfigurationError",
    "DigestlogError",
    "ErrorCategory",
    "UnknownLevelError",
]


def build_transport(settings: Settings | None = None) -> SendCapability:
    """Build the transport selected by ``settings.sink.transport``.

    Raises:
        ConfigurationError: If the transport settings are invalid.
    """
    settings = settings or Settings()
    name = settings.sink.transport
    try:
        if name == "webhook":
            config = WebhookTransportConfig.from_settings(settings.webhook)
        else:
            config = SmtpTransportConfig.from_settings(settings.smtp)
    except _ValidationError as exc:
        raise ConfigurationError(
            f"Invalid {name} transport settings: {exc.errors()[0]['msg']}",
            transport=name,
        ) from exc
    transport: SendCapability = load_transport(name, config)
    return transport


def get_sink(
    recipients: str | Iterable[str] | None = None,
    threshold: LevelLike | None = None,
    *,
    settings: Settings | None = None,
    transport: SendCapability | None = None,
    site: SiteIdentity | None = None,
    lifecycle: LifecycleRegistrar | None = None,
) -> AggregatingSink:
    """Return a digest sink configured from settings.

    Explicit arguments win over settings. Without an explicit ``lifecycle``
    the sink is flushed at interpreter exit when ``sink.flush_at_exit`` is
    true (the default); otherwise the caller owns the flush.

    Without an explicit ``transport`` one is built from settings and closed
    by the lifecycle right after the flush. Code creating many sinks (one
    per request) should build the transport once and pass it in.

    Example:
        >>> import digestlog
        >>> sink = digestlog.get_sink(["ops@example.com"], threshold="error")
        >>> sink.record(time.time(), "critical", "disk full", "storage")
        True
    """
    settings = settings or Settings()
    site_identity = site if site is not None else SettingsSiteIdentity(settings)
    defaults: DefaultRecipientProvider = (
        site_identity
        if isinstance(site_identity, DefaultRecipientProvider)
        else SettingsSiteIdentity(settings)
    )
    if lifecycle is None and settings.sink.flush_at_exit:
        lifecycle = get_process_registrar()
    # A transport built here is owned by the sink and closed after its flush
    close = None
    if transport is None:
        transport = build_transport(settings)
        close = getattr(transport, "close", None)
    try:
        sink = AggregatingSink(
            recipients if recipients is not None else settings.sink.recipients,
            threshold if threshold is not None else settings.sink.threshold,
            transport=transport,
            site=site_identity,
            default_recipients=defaults,
            lifecycle=lifecycle,
        )
    except Exception:
        if callable(close):
            close()
        raise
    if lifecycle is not None and callable(close):
        lifecycle.register(close)
    return sink

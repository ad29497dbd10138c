"""
Aggregating digest sink.

Buffers entries at or above a severity threshold during one unit of work and
sends a single digest when the unit of work ends.

WARNING: this sink is not durable. Entries live only in memory until the
flush; if the process dies first, or delivery fails, the batch is lost. Pair
it with a handler that stores logs. It also sends up to one message per unit
of work, which is a lot of mail for a busy web app: it is an alert channel,
not a monitoring system.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping
from types import TracebackType
from typing import Any

from . import diagnostics
from .composer import compose_message
from .entry import LogEntry, Timestamp, render_entry
from .errors import ConfigurationError
from .levels import LevelLike, Severity, parse_severity
from .protocols import (
    DefaultRecipientProvider,
    LifecycleRegistrar,
    SendCapability,
    SiteIdentity,
)
from .state import SinkState


class AggregatingSink:
    """Collect high-severity entries and send one digest per unit of work.

    Args:
        recipients: One address or an iterable of addresses. When None or
            empty, ``default_recipients.default_recipient()`` is used.
        threshold: Minimum severity retained (default "alert").
        transport: Send capability used by ``flush()``.
        site: Site identity used to compose the digest.
        default_recipients: Provider consulted only when no recipients are
            given. Defaults to ``site`` if it implements the provider protocol.
        lifecycle: Registrar the sink registers ``flush`` with, once. When
            omitted, the owner is responsible for calling ``flush()``.

    Raises:
        UnknownLevelError: If ``threshold`` is not a known level.
        ConfigurationError: If no recipients are given and none can be resolved.

    Example::

        with UnitOfWork() as work:
            sink = AggregatingSink(
                ["ops@example.com"],
                threshold="error",
                transport=SmtpTransport(host="mail.example.com"),
                site=StaticSiteIdentity("Shop", "https://shop.example.com/admin"),
                lifecycle=work,
            )
            sink.record(time.time(), "error", "payment gateway timeout", "billing")
    """

    name = "digest"

    def __init__(
        self,
        recipients: str | Iterable[str] | None = None,
        threshold: LevelLike = "alert",
        *,
        transport: SendCapability,
        site: SiteIdentity,
        default_recipients: DefaultRecipientProvider | None = None,
        lifecycle: LifecycleRegistrar | None = None,
    ) -> None:
        self._transport = transport
        self._site = site
        self._lock = threading.Lock()
        self._state = SinkState(threshold=parse_severity(threshold))

        if isinstance(recipients, str):
            recipients = [recipients]
        for recipient in recipients or ():
            self.add_recipient(recipient)

        if not self._state.recipients:
            provider = default_recipients
            if provider is None and isinstance(site, DefaultRecipientProvider):
                provider = site
            if provider is None:
                raise ConfigurationError(
                    "No recipients given and no default recipient provider configured"
                )
            self.add_recipient(provider.default_recipient())

        if lifecycle is not None:
            lifecycle.register(self.flush)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def add_recipient(self, address: str) -> None:
        """Append a recipient. Duplicates are kept; no syntax validation."""
        with self._lock:
            self._state.recipients.append(address)

    def set_threshold(self, level: LevelLike) -> None:
        """Change the minimum retained severity.

        Already-buffered entries are unaffected.
        """
        severity = parse_severity(level)
        with self._lock:
            self._state.threshold = severity

    @property
    def threshold(self) -> Severity:
        return self._state.threshold

    @property
    def recipients(self) -> tuple[str, ...]:
        with self._lock:
            return tuple(self._state.recipients)

    @property
    def entries(self) -> tuple[str, ...]:
        """Rendered entries buffered since the last flush, oldest first."""
        with self._lock:
            return tuple(self._state.buffer)

    @property
    def max_severity(self) -> Severity | None:
        return self._state.max_severity

    @property
    def is_empty(self) -> bool:
        return self._state.is_empty

    def __len__(self) -> int:
        return len(self._state.buffer)

    # ------------------------------------------------------------------
    # Producer API
    # ------------------------------------------------------------------

    def should_handle(self, level: LevelLike) -> bool:
        return parse_severity(level) >= self._state.threshold

    def record(
        self,
        timestamp: Timestamp,
        level: LevelLike,
        message: str,
        source: str = "",
        context: Mapping[str, Any] | None = None,
    ) -> bool:
        """Offer one entry to the sink.

        Returns:
            True if the entry was buffered, False if it was below the
            threshold. Dropping is normal and is not reported anywhere.

        Raises:
            UnknownLevelError: If ``level`` is not a known level.
        """
        severity = parse_severity(level)
        with self._lock:
            if severity < self._state.threshold:
                return False
            self._state.append(
                render_entry(timestamp, severity, message, source, context),
                severity,
            )
            return True

    def record_entry(self, entry: LogEntry) -> bool:
        return self.record(
            entry.timestamp, entry.level, entry.message, entry.source, entry.context
        )

    # ------------------------------------------------------------------
    # Flush
    # ------------------------------------------------------------------

    def flush(self) -> bool:
        """Send the buffered entries as one digest and reset.

        The buffer is cleared whether or not delivery succeeds. A transport
        that raises counts as a failed delivery.

        Returns:
            The transport's result, or False when nothing was buffered.
        """
        with self._lock:
            if self._state.is_empty:
                return False
            batch, max_severity = self._state.take()
            recipients = list(self._state.recipients)

        assert max_severity is not None
        try:
            message = compose_message(batch, max_severity, self._site)
            return bool(
                self._transport.send(recipients, message.subject, message.body)
            )
        except Exception as exc:
            diagnostics.warn(
                "digest-sink",
                "exception while sending digest",
                entries=len(batch),
                recipients=len(recipients),
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return False

    def __enter__(self) -> AggregatingSink:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.flush()


__all__ = ["AggregatingSink"]

"""
SMTP transport.

Sends each digest as one plain-text email using ``smtplib`` and
``email.message.EmailMessage``. Delivery errors are contained: ``send()``
returns False and emits a diagnostic instead of raising.
"""

from __future__ import annotations

import smtplib
from collections.abc import Callable, Sequence
from email.message import EmailMessage
from email.utils import formatdate, make_msgid
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ...core import diagnostics
from ...core.settings import SmtpSettings
from ..utils import parse_plugin_config

__all__ = ["SmtpTransport", "SmtpTransportConfig"]


class SmtpTransportConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    host: str = "localhost"
    port: int = Field(default=25, ge=1, le=65535)
    from_addr: str = "digestlog@localhost"
    username: str | None = None
    password: str | None = None
    use_tls: bool = False
    use_ssl: bool = False
    timeout_seconds: float = Field(default=10.0, gt=0.0)

    @model_validator(mode="after")
    def _check_tls_mode(self) -> SmtpTransportConfig:
        if self.use_tls and self.use_ssl:
            raise ValueError("use_tls and use_ssl are mutually exclusive")
        if self.password is not None and self.username is None:
            raise ValueError("password requires username")
        return self

    @classmethod
    def from_settings(cls, settings: SmtpSettings) -> SmtpTransportConfig:
        return cls.model_validate(settings.model_dump())


class SmtpTransport:
    """Transport delivering digests through an SMTP server."""

    name = "smtp"

    def __init__(
        self,
        config: SmtpTransportConfig | dict | None = None,
        *,
        smtp_factory: Callable[..., smtplib.SMTP] | None = None,
        **kwargs: Any,
    ) -> None:
        cfg = parse_plugin_config(SmtpTransportConfig, config, **kwargs)
        self._config = cfg
        if smtp_factory is None:
            smtp_factory = smtplib.SMTP_SSL if cfg.use_ssl else smtplib.SMTP
        self._smtp_factory = smtp_factory
        self._last_error: str | None = None

    @property
    def config(self) -> SmtpTransportConfig:
        return self._config

    def build_message(
        self, recipients: Sequence[str], subject: str, body: str
    ) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self._config.from_addr
        msg["To"] = ", ".join(recipients)
        msg["Date"] = formatdate(localtime=True)
        domain = self._config.from_addr.rpartition("@")[2]
        msg["Message-ID"] = make_msgid(domain=domain or None)
        msg.set_content(body)
        return msg

    def send(self, recipients: Sequence[str], subject: str, body: str) -> bool:
        if not recipients:
            diagnostics.warn("smtp-transport", "no recipients; digest not sent")
            return False
        cfg = self._config
        msg = self.build_message(recipients, subject, body)
        try:
            with self._smtp_factory(
                cfg.host, cfg.port, timeout=cfg.timeout_seconds
            ) as smtp:
                if cfg.use_tls:
                    smtp.starttls()
                if cfg.username is not None:
                    smtp.login(cfg.username, cfg.password or "")
                refused = smtp.send_message(msg, to_addrs=list(recipients))
        except (smtplib.SMTPException, OSError) as exc:
            self._last_error = str(exc)
            diagnostics.warn(
                "smtp-transport",
                "failed to deliver digest",
                host=cfg.host,
                port=cfg.port,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return False
        self._last_error = None
        if refused:
            diagnostics.warn(
                "smtp-transport",
                "some recipients were refused",
                refused=sorted(refused),
            )
        return True

    def health_check(self) -> bool:
        return self._last_error is None


PLUGIN_METADATA = {
    "name": "smtp",
    "version": "1.0.0",
    "plugin_type": "transport",
    "entry_point": "digestlog.plugins.transports.smtp:SmtpTransport",
    "description": "Delivers digests as plain-text email over SMTP.",
    "author": "digestlog",
    "api_version": "1.0",
}

# Mark Pydantic validators as used for vulture
_VULTURE_USED: tuple[object, ...] = (SmtpTransportConfig._check_tls_mode,)

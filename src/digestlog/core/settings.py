"""
Configuration models for digestlog using Pydantic v2 Settings.

All groups can be set from the environment with the ``DIGESTLOG_`` prefix and
``__`` as the nested delimiter, e.g. ``DIGESTLOG_SINK__THRESHOLD=error`` or
``DIGESTLOG_SMTP__HOST=mail.example.com``.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import (  # type: ignore[import-not-found]
    BaseSettings,
    SettingsConfigDict,
)

from .levels import get_all_levels

LATEST_CONFIG_SCHEMA_VERSION = "1.0"


class CoreSettings(BaseModel):
    """Library-wide behaviour."""

    internal_logging_enabled: bool = Field(
        default=False,
        description="Emit WARN diagnostics for contained internal errors",
    )


class SinkSettings(BaseModel):
    """Defaults for sinks built by ``get_sink()``."""

    threshold: str = Field(
        default="alert",
        description="Minimum severity retained by the sink",
    )
    recipients: list[str] = Field(
        default_factory=list,
        description="Recipient addresses; falls back to site.admin_email when empty",
    )
    transport: Literal["smtp", "webhook"] = Field(
        default="smtp",
        description="Delivery transport used to send the digest",
    )
    flush_at_exit: bool = Field(
        default=True,
        description="Register the sink flush with an atexit hook",
    )

    @field_validator("threshold")
    @classmethod
    def _normalize_threshold(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in get_all_levels():
            raise ValueError(
                f"threshold must be one of {', '.join(get_all_levels())}, got {value!r}"
            )
        return normalized


class SiteSettings(BaseModel):
    """Identity of the site or service the digest is about."""

    name: str = Field(default="digestlog", description="Site name shown in digests")
    admin_url: str = Field(
        default="http://localhost/admin",
        description="URL included at the end of each digest",
    )
    admin_email: str | None = Field(
        default=None,
        description="Default recipient when no recipients are configured",
    )

    @field_validator("name")
    @classmethod
    def _ensure_name_non_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("site name must not be empty")
        return value


class SmtpSettings(BaseModel):
    host: str = Field(default="localhost", description="SMTP server host")
    port: int = Field(default=25, ge=1, le=65535, description="SMTP server port")
    from_addr: str = Field(
        default="digestlog@localhost", description="Envelope sender address"
    )
    username: str | None = Field(default=None, description="Optional SMTP login")
    password: str | None = Field(default=None, description="Optional SMTP password")
    use_tls: bool = Field(default=False, description="Issue STARTTLS after connect")
    use_ssl: bool = Field(default=False, description="Connect with implicit TLS")
    timeout_seconds: float = Field(
        default=10.0, gt=0.0, description="Socket timeout for SMTP operations"
    )


class WebhookSettings(BaseModel):
    endpoint: str | None = Field(default=None, description="Webhook URL")
    secret: str | None = Field(
        default=None, description="Sent as X-Webhook-Secret when set"
    )
    timeout_seconds: float = Field(
        default=5.0, gt=0.0, description="HTTP timeout for webhook delivery"
    )


class Settings(BaseSettings):
    """Top-level configuration model."""

    schema_version: str = Field(default=LATEST_CONFIG_SCHEMA_VERSION)

    core: CoreSettings = Field(default_factory=CoreSettings)
    sink: SinkSettings = Field(default_factory=SinkSettings)
    site: SiteSettings = Field(default_factory=SiteSettings)
    smtp: SmtpSettings = Field(default_factory=SmtpSettings)
    webhook: WebhookSettings = Field(default_factory=WebhookSettings)

    model_config = SettingsConfigDict(
        env_prefix="DIGESTLOG_",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    def to_dict(self) -> dict[str, object]:
        from typing import cast

        return cast(
            dict[str, object],
            self.model_dump(by_alias=True, exclude_none=True),
        )

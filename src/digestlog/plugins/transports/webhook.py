"""
Webhook transport.

POSTs each digest as JSON ``{"recipients": [...], "subject": ..., "body": ...}``
to an HTTP endpoint (chat-ops bridges, incident tools, mail relays with an
HTTP API). Delivery errors are contained and reported as diagnostics.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...core import diagnostics
from ...core.settings import WebhookSettings
from ..utils import parse_plugin_config

__all__ = ["WebhookTransport", "WebhookTransportConfig"]


class WebhookTransportConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    endpoint: str
    secret: str | None = None
    headers: dict[str, str] = Field(default_factory=dict)
    timeout_seconds: float = Field(default=5.0, gt=0.0)

    @field_validator("headers", mode="before")
    @classmethod
    def _coerce_headers(cls, value: Mapping[str, str] | None) -> dict[str, str]:
        if value is None:
            return {}
        return dict(value)

    @classmethod
    def from_settings(cls, settings: WebhookSettings) -> WebhookTransportConfig:
        return cls(
            endpoint=settings.endpoint or "",
            secret=settings.secret,
            timeout_seconds=settings.timeout_seconds,
        )

    @field_validator("endpoint")
    @classmethod
    def _ensure_endpoint(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("endpoint must not be empty")
        return value


class WebhookTransport:
    """Transport that POSTs digests to a webhook endpoint.

    Args:
        config: Transport config (model, dict, or keyword args).
        client: Optional ``httpx.Client`` to use; the transport does not
            close a client it did not create.
    """

    name = "webhook"

    def __init__(
        self,
        config: WebhookTransportConfig | dict | None = None,
        *,
        client: httpx.Client | None = None,
        **kwargs: Any,
    ) -> None:
        cfg = parse_plugin_config(WebhookTransportConfig, config, **kwargs)
        self._config = cfg
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=cfg.timeout_seconds)
        self._last_status: int | None = None
        self._last_error: str | None = None

    @property
    def config(self) -> WebhookTransportConfig:
        return self._config

    def _headers(self) -> dict[str, str]:
        headers = dict(self._config.headers)
        if self._config.secret:
            headers.setdefault("X-Webhook-Secret", self._config.secret)
        return headers

    def send(self, recipients: Sequence[str], subject: str, body: str) -> bool:
        payload = {"recipients": list(recipients), "subject": subject, "body": body}
        try:
            resp = self._client.post(
                self._config.endpoint, json=payload, headers=self._headers()
            )
        except httpx.HTTPError as exc:
            self._last_error = str(exc)
            self._last_status = None
            diagnostics.warn(
                "webhook-transport",
                "exception while delivering digest",
                endpoint=self._config.endpoint,
                error=str(exc),
            )
            return False

        self._last_status = resp.status_code
        self._last_error = None
        if resp.status_code >= 400:
            diagnostics.warn(
                "webhook-transport",
                "failed to deliver digest",
                status_code=resp.status_code,
                endpoint=self._config.endpoint,
                body=resp.text[:256],
            )
            return False
        return True

    def health_check(self) -> bool:
        return (
            self._last_error is None
            and self._last_status is not None
            and self._last_status < 400
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


PLUGIN_METADATA = {
    "name": "webhook",
    "version": "1.0.0",
    "plugin_type": "transport",
    "entry_point": "digestlog.plugins.transports.webhook:WebhookTransport",
    "description": "POSTs digests as JSON with an optional secret header.",
    "author": "digestlog",
    "api_version": "1.0",
}

# Mark Pydantic validators as used for vulture
_VULTURE_USED: tuple[object, ...] = (
    WebhookTransportConfig._coerce_headers,
    WebhookTransportConfig._ensure_endpoint,
)

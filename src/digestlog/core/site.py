"""
Site identity and default-recipient providers.
"""

from __future__ import annotations

from dataclasses import dataclass

from .errors import ConfigurationError
from .settings import Settings, SiteSettings


@dataclass(frozen=True)
class StaticSiteIdentity:
    """Fixed site identity, useful for scripts and tests.

    Implements both ``SiteIdentity`` and ``DefaultRecipientProvider``.
    """

    name: str
    url: str = ""
    admin_email: str | None = None

    def site_name(self) -> str:
        return self.name

    def admin_url(self) -> str:
        return self.url

    def default_recipient(self) -> str:
        if not self.admin_email:
            raise ConfigurationError(
                "No default recipient configured", site=self.name
            )
        return self.admin_email


class SettingsSiteIdentity:
    """Site identity read from ``Settings.site``."""

    def __init__(self, settings: Settings | SiteSettings | None = None) -> None:
        if settings is None:
            settings = Settings()
        self._site = settings.site if isinstance(settings, Settings) else settings

    def site_name(self) -> str:
        return self._site.name

    def admin_url(self) -> str:
        return self._site.admin_url

    def default_recipient(self) -> str:
        if not self._site.admin_email:
            raise ConfigurationError(
                "No recipients configured and site.admin_email is not set "
                "(set DIGESTLOG_SINK__RECIPIENTS or DIGESTLOG_SITE__ADMIN_EMAIL)",
                site=self._site.name,
            )
        return self._site.admin_email


__all__ = ["SettingsSiteIdentity", "StaticSiteIdentity"]

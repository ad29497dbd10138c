"""
Digest message composition.

Pure functions; nothing here touches sink state. Entry order is preserved as
given, the count used for singular/plural wording is the number of entries,
and the severity shown is the maximum retained, not the last one.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .levels import LevelLike, parse_severity
from .protocols import SiteIdentity

LINE_SEPARATOR = "\n"


@dataclass(frozen=True)
class ComposedMessage:
    subject: str
    body: str


def _n(singular: str, plural: str, count: int) -> str:
    return singular if count == 1 else plural


def compose_subject(site_name: str, max_severity_name: str, entry_count: int) -> str:
    """Build the subject, e.g. ``[Shop] ERROR: 2 log messages``."""
    template = _n(
        "[{site}] {level}: {count} log message",
        "[{site}] {level}: {count} log messages",
        entry_count,
    )
    return template.format(
        site=site_name, level=max_severity_name.upper(), count=entry_count
    )


def compose_body(
    site_name: str,
    entries: Sequence[str],
    entry_count: int,
    admin_url: str,
) -> str:
    """Build the body: lead sentence, entries in order, admin link."""
    lead = _n(
        "You have received the following log message:",
        "You have received the following log messages:",
        entry_count,
    )
    return (
        lead
        + LINE_SEPARATOR
        + LINE_SEPARATOR
        + LINE_SEPARATOR.join(entries)
        + LINE_SEPARATOR
        + LINE_SEPARATOR
        + f"Visit {site_name} admin area:"
        + LINE_SEPARATOR
        + admin_url
    )


def compose_message(
    entries: Sequence[str],
    max_severity: LevelLike,
    site: SiteIdentity,
) -> ComposedMessage:
    """Compose subject and body for a flushed batch."""
    site_name = site.site_name()
    count = len(entries)
    level_name = parse_severity(max_severity).label
    return ComposedMessage(
        subject=compose_subject(site_name, level_name, count),
        body=compose_body(site_name, entries, count, site.admin_url()),
    )


__all__ = [
    "ComposedMessage",
    "LINE_SEPARATOR",
    "compose_body",
    "compose_message",
    "compose_subject",
]

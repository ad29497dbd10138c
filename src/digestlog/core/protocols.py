"""
Capabilities consumed by the aggregating sink.

The sink owns none of these: delivery, site identity, recipient defaults and
end-of-unit-of-work hooks are all injected, so hosts and tests can swap them.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Protocol, runtime_checkable


@runtime_checkable
class SendCapability(Protocol):
    """Delivers one composed message.

    Implementations report failure by returning False; they should not raise
    for delivery problems.
    """

    def send(self, recipients: Sequence[str], subject: str, body: str) -> bool:
        ...


@runtime_checkable
class SiteIdentity(Protocol):
    """Names the site or service a digest is about."""

    def site_name(self) -> str:
        ...

    def admin_url(self) -> str:
        ...


@runtime_checkable
class DefaultRecipientProvider(Protocol):
    """Supplies the recipient used when a sink is built without any."""

    def default_recipient(self) -> str:
        ...


@runtime_checkable
class LifecycleRegistrar(Protocol):
    """Registration point for end-of-unit-of-work callbacks.

    A registered callback must be invoked exactly once, after the unit of
    work's main logic has finished, whether it succeeded or failed.
    """

    def register(self, callback: Callable[[], object]) -> None:
        ...


__all__ = [
    "DefaultRecipientProvider",
    "LifecycleRegistrar",
    "SendCapability",
    "SiteIdentity",
]

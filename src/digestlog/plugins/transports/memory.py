"""
In-memory transport for testing and development.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class SentMessage:
    recipients: tuple[str, ...]
    subject: str
    body: str


class MemoryTransport:
    """Transport that stores messages instead of delivering them.

    Args:
        result: Value returned from ``send()``; set False to simulate a
            delivery failure.
    """

    name = "memory"

    def __init__(self, *, result: bool = True) -> None:
        self.result = result
        self.messages: list[SentMessage] = []

    def send(self, recipients: Sequence[str], subject: str, body: str) -> bool:
        self.messages.append(SentMessage(tuple(recipients), subject, body))
        return self.result

    @property
    def last(self) -> SentMessage | None:
        return self.messages[-1] if self.messages else None

    def clear(self) -> None:
        self.messages.clear()

    def __len__(self) -> int:
        return len(self.messages)


PLUGIN_METADATA = {
    "name": "memory",
    "version": "1.0.0",
    "plugin_type": "transport",
    "entry_point": "digestlog.plugins.transports.memory:MemoryTransport",
    "description": "Keeps sent digests in memory.",
    "author": "digestlog",
    "api_version": "1.0",
}

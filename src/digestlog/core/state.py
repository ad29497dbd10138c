"""
Per-sink mutable state.

``SinkState`` is owned by exactly one ``AggregatingSink``. It keeps the
buffered entries and the highest severity retained since the last flush, and
maintains ``not buffer <=> max_severity is None``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .levels import Severity


@dataclass
class SinkState:
    threshold: Severity = Severity.ALERT
    recipients: list[str] = field(default_factory=list)
    buffer: list[str] = field(default_factory=list)
    max_severity: Severity | None = None

    @property
    def is_empty(self) -> bool:
        return not self.buffer

    def append(self, rendered: str, severity: Severity) -> None:
        """Buffer a rendered entry and raise the max severity if needed."""
        self.buffer.append(rendered)
        if self.max_severity is None or severity > self.max_severity:
            self.max_severity = severity

    def take(self) -> tuple[list[str], Severity | None]:
        """Detach the current batch and reset to empty."""
        batch, max_severity = self.buffer, self.max_severity
        self.buffer = []
        self.max_severity = None
        return batch, max_severity


__all__ = ["SinkState"]

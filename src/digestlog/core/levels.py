"""Severity scale.

The eight syslog-style levels, ordered so that a more severe level always has
a strictly greater rank::

    debug(0) < info(1) < notice(2) < warning(3) < error(4)
        < critical(5) < alert(6) < emergency(7)

Names are matched case-insensitively. Unknown names or ranks are rejected
with ``UnknownLevelError`` rather than being mapped to a default, so a typo in
a threshold can never silently widen or narrow what a sink retains.

Example:
    >>> get_level_priority("warning") < get_level_priority("error")
    True
    >>> get_level_name(7)
    'emergency'
"""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Final, Union

from .errors import UnknownLevelError


class Severity(IntEnum):
    """Ordered severity levels; comparisons are by rank."""

    DEBUG = 0
    INFO = 1
    NOTICE = 2
    WARNING = 3
    ERROR = 4
    CRITICAL = 5
    ALERT = 6
    EMERGENCY = 7

    @property
    def label(self) -> str:
        """Lowercase level name, e.g. ``"error"``."""
        return self.name.lower()


LevelLike = Union[str, int, Severity]

_LEVELS: Final[dict[str, int]] = {
    severity.label: int(severity) for severity in Severity
}
_NAMES: Final[dict[int, str]] = {rank: name for name, rank in _LEVELS.items()}

# Standard library levels, highest first, for round-down lookup
_STDLIB_LEVELS: Final[tuple[tuple[int, Severity], ...]] = (
    (logging.CRITICAL, Severity.CRITICAL),
    (logging.ERROR, Severity.ERROR),
    (logging.WARNING, Severity.WARNING),
    (logging.INFO, Severity.INFO),
)


def get_level_priority(level: str) -> int:
    """Get the rank for a level name.

    Args:
        level: Level name (case-insensitive), e.g. ``"warning"``.

    Returns:
        Integer rank; greater means more severe.

    Raises:
        UnknownLevelError: If the name is not one of the eight levels.
    """
    if not isinstance(level, str):
        raise UnknownLevelError(level, list(_LEVELS))
    try:
        return _LEVELS[level.strip().lower()]
    except KeyError:
        raise UnknownLevelError(level, list(_LEVELS)) from None


def get_level_name(rank: int) -> str:
    """Get the level name for a rank.

    Raises:
        UnknownLevelError: If the rank is outside the scale.
    """
    try:
        return _NAMES[int(rank)]
    except (KeyError, TypeError, ValueError):
        raise UnknownLevelError(rank, list(_LEVELS)) from None


def get_all_levels() -> dict[str, int]:
    """Return a copy of the name -> rank mapping, least severe first."""
    return dict(_LEVELS)


def parse_severity(level: LevelLike) -> Severity:
    """Coerce a name, rank or ``Severity`` into a ``Severity``."""
    if isinstance(level, Severity):
        return level
    if isinstance(level, bool):
        raise UnknownLevelError(level, list(_LEVELS))
    if isinstance(level, int):
        return Severity(get_level_priority(get_level_name(level)))
    return Severity(get_level_priority(level))


def from_stdlib_level(levelno: int) -> Severity:
    """Map a ``logging`` numeric level onto the scale.

    Values between the standard levels round down to the nearest one;
    anything below INFO is treated as debug.
    """
    for threshold, severity in _STDLIB_LEVELS:
        if levelno >= threshold:
            return severity
    return Severity.DEBUG


__all__ = [
    "LevelLike",
    "Severity",
    "from_stdlib_level",
    "get_all_levels",
    "get_level_name",
    "get_level_priority",
    "parse_severity",
]

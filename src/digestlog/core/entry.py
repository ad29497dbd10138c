"""
Log entry value type and its text rendering.

Sinks never keep entries in raw form; they keep the single text block produced
by ``render_entry``. The rendering is stable for equal input: UTC ISO-8601
timestamp, uppercased level, bracketed source, message, then the context as
sorted-key JSON::

    2026-10-17T09:30:00+00:00 ERROR [billing] charge failed CONTEXT: {"order":42}
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Union

import orjson

from .levels import LevelLike, Severity, parse_severity

Timestamp = Union[datetime, int, float]

# Integer range orjson encodes natively
_INT_MIN = -(2**63)
_INT_MAX = 2**64 - 1
_MAX_DEPTH = 64


@dataclass(frozen=True)
class LogEntry:
    """A single log event offered to a sink."""

    timestamp: Timestamp
    level: LevelLike
    message: str
    source: str = ""
    context: Mapping[str, Any] = field(default_factory=dict)

    @property
    def severity(self) -> Severity:
        return parse_severity(self.level)


def _default(obj: Any) -> Any:
    """Fallback for values orjson cannot encode natively."""
    if hasattr(obj, "model_dump"):
        return obj.model_dump(exclude_none=True)
    if isinstance(obj, (set, frozenset)):
        return sorted(str(item) for item in obj)
    if isinstance(obj, BaseException):
        return f"{type(obj).__name__}: {obj}"
    return str(obj)


def format_timestamp(timestamp: Timestamp) -> str:
    """Render a datetime or POSIX epoch as an ISO-8601 UTC string.

    Values the platform cannot convert (out-of-range or NaN epochs) are
    rendered as-is.
    """
    try:
        if isinstance(timestamp, datetime):
            moment = timestamp
            if moment.tzinfo is None:
                moment = moment.replace(tzinfo=timezone.utc)
            else:
                moment = moment.astimezone(timezone.utc)
        else:
            moment = datetime.fromtimestamp(float(timestamp), tz=timezone.utc)
    except (OverflowError, OSError, ValueError, TypeError):
        return str(timestamp)
    return moment.isoformat(timespec="seconds")


def _sanitize(value: Any, depth: int = 0) -> Any:
    """Reduce a value to types orjson always accepts."""
    if depth > _MAX_DEPTH:
        return str(value)
    if isinstance(value, Mapping):
        return {str(key): _sanitize(item, depth + 1) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_sanitize(item, depth + 1) for item in value]
    if value is None or isinstance(value, (str, bool, float)):
        return value
    if isinstance(value, int):
        return value if _INT_MIN <= value <= _INT_MAX else str(value)
    converted = _default(value)
    if isinstance(converted, (dict, list)):
        return _sanitize(converted, depth + 1)
    return converted


def serialize_context(context: Mapping[str, Any] | None) -> str:
    """Serialize a context mapping to compact, key-sorted JSON.

    Never raises: when orjson rejects the mapping (integers wider than 64
    bits, nested keys it cannot encode, very deep nesting) the offending
    values and keys are stringified and the mapping is encoded again.
    """
    if not context:
        return ""
    options = orjson.OPT_SORT_KEYS | orjson.OPT_NON_STR_KEYS
    try:
        data = orjson.dumps(
            {str(key): value for key, value in context.items()},
            default=_default,
            option=options,
        )
    except TypeError:
        data = orjson.dumps(_sanitize(context), default=_default, option=options)
    return data.decode("utf-8")


def render_entry(
    timestamp: Timestamp,
    severity: Severity,
    message: str,
    source: str = "",
    context: Mapping[str, Any] | None = None,
) -> str:
    """Render one entry to the text block stored in a sink buffer."""
    parts = [format_timestamp(timestamp), severity.label.upper()]
    if source:
        parts.append(f"[{source}]")
    parts.append(str(message))
    line = " ".join(parts)
    serialized = serialize_context(context)
    if serialized:
        line = f"{line} CONTEXT: {serialized}"
    return line


__all__ = [
    "LogEntry",
    "Timestamp",
    "format_timestamp",
    "render_entry",
    "serialize_context",
]

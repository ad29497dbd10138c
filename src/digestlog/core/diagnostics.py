"""
Internal diagnostics for contained errors.

Library code that swallows an error to protect the host (a transport that
could not deliver, a lifecycle callback that raised) reports it here instead.
Output goes to the ``digestlog.diagnostics`` stdlib logger and is off unless
``Settings.core.internal_logging_enabled`` is set. Diagnostics never raise.
"""

from __future__ import annotations

import logging
from typing import Any

_LOGGER_NAME = "digestlog.diagnostics"

# Cached at first use; tests reset this to None
_internal_logging_enabled: bool | None = None


def _is_enabled() -> bool:
    global _internal_logging_enabled
    if _internal_logging_enabled is None:
        try:
            from .settings import Settings

            _internal_logging_enabled = bool(
                Settings().core.internal_logging_enabled
            )
        except Exception:
            _internal_logging_enabled = False
    return _internal_logging_enabled


def set_enabled(enabled: bool) -> None:
    """Override the cached enabled flag (e.g. from application setup)."""
    global _internal_logging_enabled
    _internal_logging_enabled = bool(enabled)


def _emit(level: int, component: str, message: str, fields: dict[str, Any]) -> None:
    if not _is_enabled():
        return
    try:
        logging.getLogger(_LOGGER_NAME).log(
            level,
            "[%s] %s",
            component,
            message,
            extra={"digestlog_component": component, "digestlog_fields": fields},
        )
    except Exception:
        return


def warn(component: str, message: str, **fields: Any) -> None:
    """Emit a WARNING diagnostic for ``component``."""
    _emit(logging.WARNING, component, message, fields)


def debug(component: str, message: str, **fields: Any) -> None:
    """Emit a DEBUG diagnostic for ``component``."""
    _emit(logging.DEBUG, component, message, fields)


__all__ = ["debug", "set_enabled", "warn"]

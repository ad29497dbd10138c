"""
Transport loader using a built-in registry plus Python entry points.

Third-party transports are advertised under the ``digestlog.transports``
entry point group. Built-ins are preferred when names collide.
"""

from __future__ import annotations

import importlib.metadata
import sys
from typing import Any, Iterable

from ..core import diagnostics
from ..core.errors import ConfigurationError
from .utils import get_plugin_name, normalize_plugin_name

ENTRY_POINT_GROUP = "digestlog.transports"

BUILTIN_TRANSPORTS: dict[str, type] = {}
BUILTIN_ALIASES: dict[str, str] = {}


class PluginNotFoundError(ConfigurationError):
    """Transport not found in built-ins or entry points."""


def register_builtin(
    name: str, cls: type, *, aliases: Iterable[str] | None = None
) -> None:
    """Register a built-in transport class and optional aliases."""
    canonical = normalize_plugin_name(name)
    BUILTIN_TRANSPORTS[canonical] = cls
    for alias in aliases or ():
        BUILTIN_ALIASES[normalize_plugin_name(alias)] = canonical


def _load_entry_point(name: str) -> type | None:
    try:
        candidates = importlib.metadata.entry_points(group=ENTRY_POINT_GROUP)
    except Exception as exc:
        diagnostics.warn("plugins", "entry point discovery failed", error=str(exc))
        return None
    for ep in candidates:
        if normalize_plugin_name(ep.name) != name:
            continue
        loaded = ep.load()
        return loaded if isinstance(loaded, type) else None
    return None


def resolve_transport(name: str) -> type:
    """Return the transport class registered under ``name``.

    Raises:
        PluginNotFoundError: If no built-in or entry point matches.
    """
    canonical = normalize_plugin_name(name)
    canonical = BUILTIN_ALIASES.get(canonical, canonical)
    if canonical in BUILTIN_TRANSPORTS:
        return BUILTIN_TRANSPORTS[canonical]
    cls = _load_entry_point(canonical)
    if cls is None:
        raise PluginNotFoundError(
            f"Unknown transport {name!r}",
            transport=name,
            available=sorted(BUILTIN_TRANSPORTS),
        )
    return cls


def load_transport(name: str, config: Any = None, **kwargs: Any) -> Any:
    """Instantiate the transport registered under ``name``."""
    cls = resolve_transport(name)
    if config is None:
        return cls(**kwargs)
    return cls(config, **kwargs)


def list_transports() -> list[str]:
    return sorted(BUILTIN_TRANSPORTS)


def get_transport_metadata(name: str) -> dict[str, Any]:
    """Return the ``PLUGIN_METADATA`` of the module defining a transport.

    Transports without metadata get a minimal record built from the class.
    """
    cls = resolve_transport(name)
    metadata = getattr(sys.modules.get(cls.__module__), "PLUGIN_METADATA", None)
    if isinstance(metadata, dict):
        return dict(metadata)
    return {
        "name": get_plugin_name(cls),
        "plugin_type": "transport",
        "entry_point": f"{cls.__module__}:{cls.__qualname__}",
    }

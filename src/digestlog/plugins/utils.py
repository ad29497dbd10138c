"""
Plugin utilities for configuration parsing and name resolution.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel

ConfigT = TypeVar("ConfigT", bound=BaseModel)


def parse_plugin_config(
    model: type[ConfigT],
    config: ConfigT | dict[str, Any] | None = None,
    **kwargs: Any,
) -> ConfigT:
    """Build a plugin config from a model instance, a dict, or keyword args.

    Keyword arguments override keys from a dict config. Passing both a model
    instance and keyword arguments applies the overrides on a validated copy.

    Raises:
        pydantic.ValidationError: If the merged values are invalid.
    """
    if isinstance(config, model):
        if not kwargs:
            return config
        return model.model_validate({**config.model_dump(), **kwargs})
    data: dict[str, Any] = dict(config or {})
    data.update(kwargs)
    return model.model_validate(data)


def normalize_plugin_name(name: str) -> str:
    """Normalize a plugin name to canonical form.

    Converts hyphens to underscores and lowercases.
    """
    return name.replace("-", "_").strip().lower()


def get_plugin_name(plugin: Any) -> str:
    """Get the canonical name of a plugin: its ``name`` attribute or class name."""
    name = getattr(plugin, "name", None)
    if name and isinstance(name, str) and name.strip():
        return name.strip()
    cls = plugin if isinstance(plugin, type) else plugin.__class__
    return cls.__name__

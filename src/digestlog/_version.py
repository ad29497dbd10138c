"""
Package version.

Hatchling reads ``__version__`` from this file for the ``version`` field in
pyproject.toml (``[tool.hatch.version] path``). Bump it here when releasing.
"""

__version__ = "0.1.0"

"""
Root pytest configuration.
"""

from __future__ import annotations

from collections.abc import Generator

import pytest

# Register digestlog testing fixtures for all tests
pytest_plugins = ("digestlog.testing.fixtures",)


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line(
        "markers",
        "critical: Tests that must never fail - core functionality",
    )
    config.addinivalue_line(
        "markers",
        "integration: Tests exercising framework or network integrations",
    )
    config.addinivalue_line(
        "markers",
        "property: Property-based tests (may be slow)",
    )


@pytest.fixture(autouse=True)
def reset_diagnostics_cache() -> Generator[None, None, None]:
    """Reset the diagnostics module cache before each test.

    The diagnostics module caches the `internal_logging_enabled` setting at
    first access. Resetting it keeps tests from inheriting that state.
    """
    import digestlog.core.diagnostics as diag

    diag._internal_logging_enabled = None
    yield
    diag._internal_logging_enabled = None


@pytest.fixture(autouse=True)
def reset_process_registrar() -> Generator[None, None, None]:
    """Drop the shared atexit registrar so sinks from one test never flush later."""
    from digestlog.core.lifecycle import _reset_process_registrar

    _reset_process_registrar()
    yield
    _reset_process_registrar()

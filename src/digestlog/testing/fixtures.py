"""
Pytest fixtures for code that uses digestlog.

Register with ``pytest_plugins = ("digestlog.testing.fixtures",)``.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from ..core import diagnostics
from ..core.lifecycle import UnitOfWork
from ..core.sink import AggregatingSink
from ..core.site import StaticSiteIdentity
from ..plugins.transports.memory import MemoryTransport


@pytest.fixture
def memory_transport() -> MemoryTransport:
    """A fresh in-memory transport that reports success."""
    return MemoryTransport()


@pytest.fixture
def static_site() -> StaticSiteIdentity:
    return StaticSiteIdentity(
        name="Test Site",
        url="https://test.example.com/admin",
        admin_email="admin@test.example.com",
    )


@pytest.fixture
def unit_of_work() -> Iterator[UnitOfWork]:
    """A unit of work completed at fixture teardown if the test did not."""
    work = UnitOfWork(name="test")
    yield work
    work.complete()


@pytest.fixture
def digest_sink(
    memory_transport: MemoryTransport,
    static_site: StaticSiteIdentity,
) -> AggregatingSink:
    """Sink at threshold "warning" delivering to ``memory_transport``."""
    return AggregatingSink(
        ["ops@test.example.com"],
        "warning",
        transport=memory_transport,
        site=static_site,
    )


@pytest.fixture
def diagnostics_enabled() -> Iterator[None]:
    """Turn internal diagnostics on for the duration of a test."""
    diagnostics.set_enabled(True)
    yield
    diagnostics._internal_logging_enabled = None

"""Tests for end-of-unit-of-work registrars."""

from __future__ import annotations

import atexit
import logging
from unittest.mock import patch

import pytest

from digestlog.core.errors import ConfigurationError, ErrorCategory
from digestlog.core.lifecycle import (
    AtexitRegistrar,
    UnitOfWork,
    get_process_registrar,
)


class TestUnitOfWork:
    def test_callbacks_run_once_in_order(self) -> None:
        calls: list[str] = []
        work = UnitOfWork()
        work.register(lambda: calls.append("a"))
        work.register(lambda: calls.append("b"))

        work.complete()
        work.complete()

        assert calls == ["a", "b"]
        assert work.completed

    def test_context_manager_runs_on_exception(self) -> None:
        calls: list[str] = []
        with pytest.raises(ValueError):
            with UnitOfWork() as work:
                work.register(lambda: calls.append("flushed"))
                raise ValueError("boom")
        assert calls == ["flushed"]

    def test_register_after_completion_raises(self) -> None:
        work = UnitOfWork(name="job-42")
        work.complete()
        with pytest.raises(ConfigurationError, match="job-42") as exc_info:
            work.register(lambda: None)
        assert exc_info.value.category is ErrorCategory.LIFECYCLE

    def test_raising_callback_does_not_stop_others(
        self, diagnostics_enabled: None, caplog: pytest.LogCaptureFixture
    ) -> None:
        calls: list[str] = []

        def bad() -> None:
            raise RuntimeError("nope")

        work = UnitOfWork()
        work.register(bad)
        work.register(lambda: calls.append("after"))

        with caplog.at_level(logging.WARNING, logger="digestlog.diagnostics"):
            work.complete()

        assert calls == ["after"]
        assert any("callback raised" in r.getMessage() for r in caplog.records)


class TestAtexitRegistrar:
    def test_installs_atexit_hook_once(self) -> None:
        registrar = AtexitRegistrar()
        with patch.object(atexit, "register") as reg:
            registrar.register(lambda: None)
            registrar.register(lambda: None)
        reg.assert_called_once_with(registrar.run)
        assert len(registrar) == 2

    def test_run_fires_each_callback_at_most_once(self) -> None:
        calls: list[int] = []
        registrar = AtexitRegistrar()
        with patch.object(atexit, "register"):
            registrar.register(lambda: calls.append(1))
        registrar.run()
        registrar.run()
        assert calls == [1]

    def test_register_after_run_raises(self) -> None:
        registrar = AtexitRegistrar()
        registrar.run()
        with pytest.raises(ConfigurationError):
            registrar.register(lambda: None)

    def test_uninstall_unregisters(self) -> None:
        registrar = AtexitRegistrar()
        with patch.object(atexit, "register"), patch.object(
            atexit, "unregister"
        ) as unreg:
            registrar.register(lambda: None)
            registrar.uninstall()
        unreg.assert_called_once_with(registrar.run)
        assert len(registrar) == 0


def test_process_registrar_is_shared() -> None:
    assert get_process_registrar() is get_process_registrar()

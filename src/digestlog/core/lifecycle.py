"""End-of-unit-of-work registrars.

Two ``LifecycleRegistrar`` implementations:

- ``UnitOfWork``: an explicit scope (a job, a test, a request). Used as a
  context manager, it runs every registered callback once on exit, whether the
  body returned or raised.
- ``AtexitRegistrar``: the whole process run is the unit of work. Callbacks
  are run by an ``atexit`` handler at interpreter shutdown.

Callbacks run in registration order. A callback that raises is reported as a
diagnostic and does not stop the others; end-of-work hooks must not crash the
host while it is tearing down.
"""

from __future__ import annotations

import atexit
import threading
from collections.abc import Callable
from types import TracebackType

from . import diagnostics
from .errors import ConfigurationError, ErrorCategory


def _run_callbacks(callbacks: list[Callable[[], object]], component: str) -> None:
    for callback in callbacks:
        try:
            callback()
        except Exception as exc:
            diagnostics.warn(
                component,
                "end-of-work callback raised",
                callback=getattr(callback, "__qualname__", repr(callback)),
                error=str(exc),
                error_type=type(exc).__name__,
            )


class UnitOfWork:
    """Scoped registrar that fires its callbacks exactly once.

    Example:
        with UnitOfWork() as work:
            sink = AggregatingSink(["ops@example.com"], lifecycle=work, ...)
            run_job(sink)
        # sink.flush() has run here
    """

    def __init__(self, name: str = "unit-of-work") -> None:
        self.name = name
        self._callbacks: list[Callable[[], object]] = []
        self._lock = threading.Lock()
        self._completed = False

    @property
    def completed(self) -> bool:
        return self._completed

    def register(self, callback: Callable[[], object]) -> None:
        with self._lock:
            if self._completed:
                raise ConfigurationError(
                    f"Unit of work {self.name!r} has already completed",
                    category=ErrorCategory.LIFECYCLE,
                    unit_of_work=self.name,
                )
            self._callbacks.append(callback)

    def complete(self) -> None:
        """Run registered callbacks; later calls are no-ops."""
        with self._lock:
            if self._completed:
                return
            self._completed = True
            callbacks, self._callbacks = self._callbacks, []
        _run_callbacks(callbacks, "lifecycle")

    def __enter__(self) -> UnitOfWork:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.complete()


class AtexitRegistrar:
    """Registrar whose unit of work is the interpreter process.

    The atexit handler is installed lazily on first registration. Each
    callback runs at most once, even if ``run()`` is also called manually.
    """

    def __init__(self) -> None:
        self._callbacks: list[Callable[[], object]] = []
        self._lock = threading.Lock()
        self._installed = False
        self._ran = False

    def register(self, callback: Callable[[], object]) -> None:
        with self._lock:
            if self._ran:
                raise ConfigurationError(
                    "Process shutdown hooks have already run",
                    category=ErrorCategory.LIFECYCLE,
                )
            self._callbacks.append(callback)
            if not self._installed:
                atexit.register(self.run)
                self._installed = True

    def run(self) -> None:
        with self._lock:
            if self._ran:
                return
            self._ran = True
            callbacks, self._callbacks = self._callbacks, []
        _run_callbacks(callbacks, "atexit")

    def uninstall(self) -> None:
        """Remove the atexit hook without running callbacks."""
        with self._lock:
            if self._installed:
                atexit.unregister(self.run)
                self._installed = False
            self._callbacks.clear()

    def __len__(self) -> int:
        return len(self._callbacks)


_process_registrar: AtexitRegistrar | None = None
_process_lock = threading.Lock()


def get_process_registrar() -> AtexitRegistrar:
    """Return the shared process-wide ``AtexitRegistrar``."""
    global _process_registrar
    with _process_lock:
        if _process_registrar is None:
            _process_registrar = AtexitRegistrar()
        return _process_registrar


def _reset_process_registrar() -> None:
    """Drop the shared registrar (for testing only)."""
    global _process_registrar
    with _process_lock:
        if _process_registrar is not None:
            _process_registrar.uninstall()
        _process_registrar = None


__all__ = [
    "AtexitRegistrar",
    "UnitOfWork",
    "get_process_registrar",
]

"""Tests for AggregatingSink."""

from __future__ import annotations

import logging
import threading

import pytest

from digestlog.core.entry import LogEntry
from digestlog.core.errors import ConfigurationError, UnknownLevelError
from digestlog.core.levels import Severity
from digestlog.core.lifecycle import UnitOfWork
from digestlog.core.sink import AggregatingSink
from digestlog.core.site import StaticSiteIdentity
from digestlog.plugins.transports.memory import MemoryTransport
from digestlog.testing import ImmediateRegistrar, RaisingTransport

TS = 1_792_143_000


def make_sink(
    transport: MemoryTransport,
    *,
    threshold: str = "warning",
    recipients: list[str] | None = None,
) -> AggregatingSink:
    return AggregatingSink(
        recipients if recipients is not None else ["ops@example.com"],
        threshold,
        transport=transport,
        site=StaticSiteIdentity("Shop", "https://shop.example.com/admin"),
    )


class TestConstruction:
    def test_default_threshold_is_alert(
        self, memory_transport: MemoryTransport
    ) -> None:
        sink = AggregatingSink(
            ["ops@example.com"],
            transport=memory_transport,
            site=StaticSiteIdentity("Shop"),
        )
        assert sink.threshold is Severity.ALERT

    def test_single_address_string(self, memory_transport: MemoryTransport) -> None:
        sink = AggregatingSink(
            "ops@example.com", transport=memory_transport, site=StaticSiteIdentity("S")
        )
        assert sink.recipients == ("ops@example.com",)

    def test_default_recipient_from_site(
        self, memory_transport: MemoryTransport
    ) -> None:
        site = StaticSiteIdentity("Shop", admin_email="admin@example.com")
        sink = AggregatingSink(None, transport=memory_transport, site=site)
        assert sink.recipients == ("admin@example.com",)

    def test_default_recipient_provider_used_only_when_empty(
        self, memory_transport: MemoryTransport
    ) -> None:
        calls: list[str] = []

        class Provider:
            def default_recipient(self) -> str:
                calls.append("called")
                return "fallback@example.com"

        sink = AggregatingSink(
            [],
            transport=memory_transport,
            site=StaticSiteIdentity("Shop"),
            default_recipients=Provider(),
        )
        assert sink.recipients == ("fallback@example.com",)

        AggregatingSink(
            ["ops@example.com"],
            transport=memory_transport,
            site=StaticSiteIdentity("Shop"),
            default_recipients=Provider(),
        )
        assert calls == ["called"]

    def test_no_recipients_resolvable_raises(
        self, memory_transport: MemoryTransport
    ) -> None:
        class BareSite:
            def site_name(self) -> str:
                return "Bare"

            def admin_url(self) -> str:
                return ""

        with pytest.raises(ConfigurationError):
            AggregatingSink(None, transport=memory_transport, site=BareSite())

    def test_unknown_threshold_rejected(
        self, memory_transport: MemoryTransport
    ) -> None:
        with pytest.raises(UnknownLevelError):
            make_sink(memory_transport, threshold="loud")

    def test_registers_flush_exactly_once(
        self, memory_transport: MemoryTransport
    ) -> None:
        registrar = ImmediateRegistrar()
        sink = AggregatingSink(
            ["ops@example.com"],
            transport=memory_transport,
            site=StaticSiteIdentity("Shop"),
            lifecycle=registrar,
        )
        assert registrar.callbacks == [sink.flush]


class TestRecipients:
    def test_add_recipient_appends_in_order(
        self, memory_transport: MemoryTransport
    ) -> None:
        sink = make_sink(memory_transport, recipients=["a@example.com"])
        sink.add_recipient("b@example.com")
        assert sink.recipients == ("a@example.com", "b@example.com")

    def test_duplicates_are_kept(self, memory_transport: MemoryTransport) -> None:
        sink = make_sink(memory_transport, recipients=["a@example.com"])
        sink.add_recipient("a@example.com")
        assert sink.recipients == ("a@example.com", "a@example.com")

    def test_no_address_validation(self, memory_transport: MemoryTransport) -> None:
        sink = make_sink(memory_transport)
        sink.add_recipient("not an address")
        assert "not an address" in sink.recipients

    def test_two_added_recipients_passed_to_send_in_order(
        self, memory_transport: MemoryTransport
    ) -> None:
        site = StaticSiteIdentity("Shop", admin_email="ignored@example.com")
        sink = AggregatingSink(
            ["first@example.com"], "error", transport=memory_transport, site=site
        )
        sink.add_recipient("second@example.com")
        sink.record(TS, "error", "boom")
        assert sink.flush() is True
        assert memory_transport.messages[0].recipients == (
            "first@example.com",
            "second@example.com",
        )


class TestRecord:
    @pytest.mark.critical
    def test_threshold_scenario(self, memory_transport: MemoryTransport) -> None:
        """debug, warning, error, info at threshold warning."""
        sink = make_sink(memory_transport, threshold="warning")

        results = [
            sink.record(TS, "debug", "debug msg", "app"),
            sink.record(TS, "warning", "warning msg", "app"),
            sink.record(TS, "error", "error msg", "app"),
            sink.record(TS, "info", "info msg", "app"),
        ]

        assert results == [False, True, True, False]
        assert len(sink) == 2
        assert "WARNING" in sink.entries[0] and "warning msg" in sink.entries[0]
        assert "ERROR" in sink.entries[1] and "error msg" in sink.entries[1]
        assert sink.max_severity is Severity.ERROR

    def test_entry_at_threshold_is_kept(
        self, memory_transport: MemoryTransport
    ) -> None:
        sink = make_sink(memory_transport, threshold="alert")
        assert sink.record(TS, "alert", "x") is True

    def test_drop_leaves_buffer_unchanged(
        self, memory_transport: MemoryTransport
    ) -> None:
        sink = make_sink(memory_transport, threshold="error")
        sink.record(TS, "critical", "kept")
        before = sink.entries
        assert sink.record(TS, "notice", "dropped") is False
        assert sink.entries == before
        assert sink.max_severity is Severity.CRITICAL

    def test_drop_is_silent(
        self, memory_transport: MemoryTransport, caplog: pytest.LogCaptureFixture
    ) -> None:
        sink = make_sink(memory_transport, threshold="error")
        with caplog.at_level(logging.DEBUG):
            sink.record(TS, "debug", "dropped")
        assert caplog.records == []

    def test_max_severity_ignores_dropped_entries(
        self, memory_transport: MemoryTransport
    ) -> None:
        sink = make_sink(memory_transport, threshold="warning")
        sink.set_threshold("emergency")
        sink.record(TS, "alert", "dropped")
        sink.set_threshold("warning")
        sink.record(TS, "warning", "kept")
        assert sink.max_severity is Severity.WARNING

    def test_max_severity_not_last_entry(
        self, memory_transport: MemoryTransport
    ) -> None:
        sink = make_sink(memory_transport, threshold="debug")
        sink.record(TS, "emergency", "first")
        sink.record(TS, "debug", "second")
        assert sink.max_severity is Severity.EMERGENCY

    def test_debug_max_severity_is_not_none(
        self, memory_transport: MemoryTransport
    ) -> None:
        sink = make_sink(memory_transport, threshold="debug")
        sink.record(TS, "debug", "lowest")
        assert sink.max_severity is Severity.DEBUG
        assert not sink.is_empty

    def test_unknown_level_rejected(self, memory_transport: MemoryTransport) -> None:
        sink = make_sink(memory_transport)
        with pytest.raises(UnknownLevelError):
            sink.record(TS, "fatal", "x")
        assert sink.is_empty

    def test_context_rendered(self, memory_transport: MemoryTransport) -> None:
        sink = make_sink(memory_transport)
        sink.record(TS, "error", "charge failed", "billing", {"order": 42})
        assert sink.entries[0].endswith('charge failed CONTEXT: {"order":42}')
        assert "[billing]" in sink.entries[0]

    def test_record_entry(self, memory_transport: MemoryTransport) -> None:
        sink = make_sink(memory_transport)
        assert sink.record_entry(LogEntry(TS, "error", "m", "src", {"k": 1})) is True
        assert sink.record_entry(LogEntry(TS, "info", "m")) is False
        assert len(sink) == 1

    def test_set_threshold_does_not_touch_buffer(
        self, memory_transport: MemoryTransport
    ) -> None:
        sink = make_sink(memory_transport, threshold="warning")
        sink.record(TS, "warning", "kept")
        sink.set_threshold("emergency")
        assert len(sink) == 1
        assert sink.threshold is Severity.EMERGENCY
        assert sink.record(TS, "alert", "now dropped") is False

    def test_set_threshold_unknown_keeps_previous(
        self, memory_transport: MemoryTransport
    ) -> None:
        sink = make_sink(memory_transport, threshold="warning")
        with pytest.raises(UnknownLevelError):
            sink.set_threshold("loud")
        assert sink.threshold is Severity.WARNING

    def test_should_handle(self, memory_transport: MemoryTransport) -> None:
        sink = make_sink(memory_transport, threshold="error")
        assert sink.should_handle("critical")
        assert not sink.should_handle("warning")

    def test_unencodable_context_is_still_recorded(
        self, memory_transport: MemoryTransport
    ) -> None:
        sink = make_sink(memory_transport, threshold="error")
        assert sink.record(TS, "error", "wide id", "orders", {"order_id": 2**64})
        assert sink.record(TS, "error", "odd keys", "orders", {"m": {(1, 2): "x"}})
        assert len(sink) == 2
        assert '"order_id":"18446744073709551616"' in sink.entries[0]
        assert '{"m":{"(1, 2)":"x"}}' in sink.entries[1]

    def test_out_of_range_timestamp_is_still_recorded(
        self, memory_transport: MemoryTransport
    ) -> None:
        sink = make_sink(memory_transport, threshold="error")
        assert sink.record(1e20, "error", "far future") is True
        assert sink.entries[0] == "1e+20 ERROR far future"


class TestFlush:
    @pytest.mark.critical
    def test_flush_sends_one_digest_and_resets(
        self, memory_transport: MemoryTransport
    ) -> None:
        sink = make_sink(memory_transport, threshold="warning")
        for level in ("debug", "warning", "error", "info"):
            sink.record(TS, level, f"{level} msg", "app")

        assert sink.flush() is True

        assert len(memory_transport) == 1
        sent = memory_transport.messages[0]
        assert "2" in sent.subject and "ERROR" in sent.subject
        assert sent.subject == "[Shop] ERROR: 2 log messages"
        assert sent.body.index("warning msg") < sent.body.index("error msg")
        assert "debug msg" not in sent.body
        assert sink.is_empty
        assert sink.max_severity is None

    def test_empty_flush_returns_false_and_never_sends(
        self, memory_transport: MemoryTransport
    ) -> None:
        sink = make_sink(memory_transport, threshold="alert")
        assert sink.flush() is False
        assert sink.flush() is False
        assert len(memory_transport) == 0
        assert sink.is_empty and sink.max_severity is None

    def test_failed_send_still_discards_batch(self) -> None:
        transport = MemoryTransport(result=False)
        sink = make_sink(transport)
        sink.record(TS, "error", "lost")

        assert sink.flush() is False
        assert len(transport) == 1
        assert sink.is_empty
        assert sink.max_severity is None
        assert sink.flush() is False
        assert len(transport) == 1

    def test_raising_transport_counts_as_failure(self) -> None:
        transport = RaisingTransport()
        sink = AggregatingSink(
            ["ops@example.com"],
            "error",
            transport=transport,
            site=StaticSiteIdentity("Shop"),
        )
        sink.record(TS, "error", "x")
        assert sink.flush() is False
        assert transport.calls == 1
        assert sink.is_empty

    def test_raising_transport_emits_diagnostic(
        self, diagnostics_enabled: None, caplog: pytest.LogCaptureFixture
    ) -> None:
        sink = AggregatingSink(
            ["ops@example.com"],
            "error",
            transport=RaisingTransport(ConnectionError("refused")),
            site=StaticSiteIdentity("Shop"),
        )
        sink.record(TS, "error", "x")
        with caplog.at_level(logging.WARNING, logger="digestlog.diagnostics"):
            sink.flush()
        assert len(caplog.records) == 1
        record = caplog.records[0]
        assert record.digestlog_component == "digest-sink"  # type: ignore[attr-defined]
        fields = record.digestlog_fields  # type: ignore[attr-defined]
        assert fields["error_type"] == "ConnectionError"

    def test_entries_after_flush_start_new_batch(
        self, memory_transport: MemoryTransport
    ) -> None:
        sink = make_sink(memory_transport)
        sink.record(TS, "critical", "first batch")
        sink.flush()
        sink.record(TS, "warning", "second batch")
        sink.flush()

        assert len(memory_transport) == 2
        assert memory_transport.messages[1].subject == "[Shop] WARNING: 1 log message"
        assert "first batch" not in memory_transport.messages[1].body

    def test_context_manager_flushes(self, memory_transport: MemoryTransport) -> None:
        with make_sink(memory_transport) as sink:
            sink.record(TS, "error", "x")
        assert len(memory_transport) == 1

    def test_unit_of_work_flushes_once(
        self, memory_transport: MemoryTransport
    ) -> None:
        with UnitOfWork() as work:
            sink = AggregatingSink(
                ["ops@example.com"],
                "error",
                transport=memory_transport,
                site=StaticSiteIdentity("Shop"),
                lifecycle=work,
            )
            sink.record(TS, "error", "x")
        work.complete()
        assert len(memory_transport) == 1

    def test_unit_of_work_flushes_on_exception(
        self, memory_transport: MemoryTransport
    ) -> None:
        with pytest.raises(RuntimeError):
            with UnitOfWork() as work:
                sink = AggregatingSink(
                    ["ops@example.com"],
                    "error",
                    transport=memory_transport,
                    site=StaticSiteIdentity("Shop"),
                    lifecycle=work,
                )
                sink.record(TS, "critical", "about to fail")
                raise RuntimeError("job failed")
        assert len(memory_transport) == 1
        assert "about to fail" in memory_transport.messages[0].body


class TestConcurrency:
    def test_concurrent_records_are_all_kept(
        self, memory_transport: MemoryTransport
    ) -> None:
        sink = make_sink(memory_transport, threshold="debug")
        workers = 8
        per_worker = 200

        def produce(worker: int) -> None:
            for i in range(per_worker):
                level = "error" if i % 2 else "info"
                sink.record(TS, level, f"w{worker}-{i}")

        threads = [threading.Thread(target=produce, args=(n,)) for n in range(workers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(sink) == workers * per_worker
        assert sink.max_severity is Severity.ERROR
        assert sink.flush() is True
        assert memory_transport.messages[0].subject.endswith(
            f"{workers * per_worker} log messages"
        )

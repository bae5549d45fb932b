"""
Timing Recorder Unit Tests
"""

from datetime import timedelta

import pytest

from httpstat.recorder import TimingRecorder

MS = timedelta(milliseconds=1)


def ns(ms: float) -> int:
    return int(ms * 1_000_000)


def run_fresh_tls(recorder, clock):
    """DNS 0-10, TCP 10-30, TLS 30-60, written 60, first byte 110"""
    clock.at(0)
    recorder.record_dns_start()
    clock.at(10)
    recorder.record_dns_done()
    recorder.record_connect_start()
    clock.at(30)
    recorder.record_connect_done()
    recorder.record_tls_start()
    clock.at(60)
    recorder.record_tls_done()
    recorder.record_connection_obtained(reused=False)
    recorder.record_request_written()
    clock.at(110)
    recorder.record_first_response_byte()


class TestScenarios:
    """End-to-end event sequences"""

    def test_fresh_tls_connection(self, recorder, clock):
        run_fresh_tls(recorder, clock)
        recorder.finalize(ns(150))

        assert recorder.dns_lookup == 10 * MS
        assert recorder.tcp_connection == 20 * MS
        assert recorder.tls_handshake == 30 * MS
        assert recorder.server_processing == 50 * MS
        assert recorder.content_transfer == 40 * MS

        assert recorder.name_lookup == 10 * MS
        assert recorder.connect == 30 * MS
        assert recorder.pretransfer == 60 * MS
        assert recorder.start_transfer == 110 * MS
        assert recorder.total == 150 * MS

        assert recorder.is_tls is True
        assert recorder.is_reused is False

    def test_reused_keep_alive_connection(self, recorder, clock):
        recorder.record_connection_obtained(reused=True)
        clock.at(0)
        recorder.record_request_written()
        clock.at(5)
        recorder.record_first_response_byte()
        recorder.finalize(ns(8))

        assert recorder.dns_lookup == timedelta(0)
        assert recorder.tcp_connection == timedelta(0)
        assert recorder.tls_handshake == timedelta(0)
        assert recorder.server_processing == 5 * MS
        assert recorder.content_transfer == 3 * MS
        assert recorder.total == 8 * MS
        assert recorder.is_reused is True

    def test_plaintext_fresh_connection(self, recorder, clock):
        clock.at(0)
        recorder.record_dns_start()
        clock.at(10)
        recorder.record_dns_done()
        recorder.record_connect_start()
        clock.at(30)
        recorder.record_connect_done()
        recorder.record_request_written()
        clock.at(80)
        recorder.record_first_response_byte()
        recorder.finalize(ns(100))

        assert recorder.is_tls is False
        assert recorder.tls_handshake == timedelta(0)
        assert recorder.pretransfer == recorder.connect == 30 * MS
        assert recorder.server_processing == 50 * MS
        assert recorder.total == 100 * MS


class TestReconciliation:
    """Skipped and reordered phases"""

    def test_direct_ip_backfills_anchor(self, recorder, clock):
        clock.at(5)
        recorder.record_connect_start()

        assert recorder.dns_start == recorder.tcp_start == ns(5)
        assert recorder.dns_lookup == timedelta(0)
        assert recorder.name_lookup == timedelta(0)

        clock.at(25)
        recorder.record_connect_done()
        assert recorder.tcp_connection == 20 * MS
        assert recorder.connect == 20 * MS

    def test_hooks_never_fired(self, recorder, clock):
        clock.at(7)
        recorder.record_request_written()

        assert recorder.dns_start == recorder.tcp_start == recorder.server_start == ns(7)
        assert recorder.connect == timedelta(0)
        assert recorder.pretransfer == timedelta(0)

        clock.at(12)
        recorder.record_first_response_byte()
        assert recorder.start_transfer == 5 * MS

    def test_reuse_collapses_connection_phases(self, recorder, clock):
        recorder.record_connection_obtained(reused=True)
        clock.at(40)
        recorder.record_request_written()

        assert recorder.dns_start == recorder.tcp_start == recorder.tls_start == recorder.server_start
        assert recorder.dns_lookup == timedelta(0)
        assert recorder.tcp_connection == timedelta(0)
        assert recorder.tls_handshake == timedelta(0)
        assert recorder.connect == timedelta(0)

    def test_not_reused_leaves_flag_unset(self, recorder):
        recorder.record_connection_obtained(reused=False)
        assert recorder.is_reused is False

    def test_non_tls_forces_pretransfer_to_connect(self, recorder, clock):
        clock.at(0)
        recorder.record_connect_start()
        clock.at(15)
        recorder.record_connect_done()
        clock.at(20)
        recorder.record_request_written()

        assert recorder.tls_handshake == timedelta(0)
        assert recorder.pretransfer == recorder.connect == 15 * MS

    def test_tls_keeps_handshake_after_request_written(self, recorder, clock):
        run_fresh_tls(recorder, clock)
        assert recorder.tls_handshake == 30 * MS
        assert recorder.pretransfer == 60 * MS

    @pytest.mark.parametrize(
        "events",
        [
            ["dns_start", "dns_done", "connect_start", "connect_done", "tls_start", "tls_done",
             "request_written", "first_response_byte"],
            ["connect_start", "connect_done", "tls_start", "tls_done", "request_written",
             "first_response_byte"],
            ["dns_start", "dns_done", "connect_start", "connect_done", "request_written",
             "first_response_byte"],
            ["request_written", "first_response_byte"],
            ["reused", "request_written", "first_response_byte"],
        ],
    )
    def test_durations_never_negative(self, recorder, clock, events):
        for event in events:
            clock.advance(3)
            if event == "reused":
                recorder.record_connection_obtained(reused=True)
            else:
                getattr(recorder, f"record_{event}")()
        clock.advance(3)
        recorder.finalize()

        assert recorder.finalized
        for name, value in recorder.durations().items():
            assert value >= timedelta(0), name


class TestFinalize:
    """finalize() and the unmeasured values"""

    def test_unmeasured_until_finalized(self, recorder, clock):
        run_fresh_tls(recorder, clock)

        assert recorder.content_transfer is None
        assert recorder.total is None
        assert recorder.finalized is False

    def test_finalize_without_events_is_noop(self, recorder, clock):
        clock.at(500)
        recorder.finalize()

        assert recorder.finalized is False
        assert recorder.content_transfer is None
        assert recorder.total is None
        for name, value in recorder.durations().items():
            assert value in (timedelta(0), None), name

    def test_finalize_defaults_to_clock(self, recorder, clock):
        run_fresh_tls(recorder, clock)
        clock.at(130)
        recorder.finalize()

        assert recorder.content_transfer == 20 * MS
        assert recorder.total == 130 * MS

    def test_zero_length_transfer_is_measured(self, recorder, clock):
        run_fresh_tls(recorder, clock)
        recorder.finalize()

        assert recorder.content_transfer == timedelta(0)
        assert recorder.finalized is True


class TestLiveValues:
    """Elapsed accessors while the request is in flight"""

    def test_live_estimates_do_not_mutate(self, recorder, clock):
        run_fresh_tls(recorder, clock)
        clock.at(130)

        assert recorder.content_transfer_elapsed() == 20 * MS
        assert recorder.total_elapsed() == 130 * MS
        assert recorder.content_transfer is None
        assert recorder.total is None

    def test_finalized_values_are_fixed(self, recorder, clock):
        run_fresh_tls(recorder, clock)
        recorder.finalize(ns(150))
        clock.at(900)

        assert recorder.content_transfer_elapsed() == 40 * MS
        assert recorder.total_elapsed() == 150 * MS

    def test_live_total_before_start_measures_from_clock_epoch(self, recorder, clock):
        # Querying before the request started is a caller error: the value
        # is measured from instant 0 and means nothing.
        clock.at(42)
        assert recorder.total_elapsed() == 42 * MS
        assert recorder.dns_start is None

    def test_until(self, recorder, clock):
        run_fresh_tls(recorder, clock)
        assert recorder.until(ns(75)) == 75 * MS


class TestDurations:
    """Named duration map"""

    def test_keys_in_display_order(self, recorder):
        assert list(recorder.durations()) == [
            "DNSLookup",
            "TCPConnection",
            "TLSHandshake",
            "ServerProcessing",
            "ContentTransfer",
            "NameLookup",
            "Connect",
            "Pretransfer",
            "StartTransfer",
            "Total",
        ]

    def test_pretransfer_reports_pretransfer(self, recorder, clock):
        run_fresh_tls(recorder, clock)
        durations = recorder.durations()

        assert durations["Pretransfer"] == 60 * MS
        assert durations["Connect"] == 30 * MS

    def test_record_operations_documented(self):
        operations = [name for name in dir(TimingRecorder) if name.startswith("record_")]

        assert len(operations) == 9
        for name in operations:
            assert getattr(TimingRecorder, name).__doc__, name

    def test_default_clock(self):
        recorder = TimingRecorder()
        recorder.record_dns_start()
        recorder.record_dns_done()

        assert recorder.dns_lookup >= timedelta(0)
        assert recorder.name_lookup == recorder.dns_lookup

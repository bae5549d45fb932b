"""
Timing Recorder Module

Records the connection lifecycle of a single HTTP request and derives the
latency breakdown (DNS, TCP, TLS, server processing, content transfer) plus
the cumulative timeline measured from the start of the request.
"""

import time
from datetime import timedelta
from typing import Callable, Optional

ZERO = timedelta(0)


def _span(start: Optional[int], end: int) -> timedelta:
    # An unset start is read as the clock epoch (instant 0).
    return timedelta(microseconds=(end - (start or 0)) / 1000)


class TimingRecorder:
    """
    Per-request Timing Recorder

    Populated by connection lifecycle callbacks (see ``httpstat.tracing``) and
    finalized by an explicit ``finalize()`` call once the response body has
    been fully read. One instance observes exactly one request and is not
    safe to share between concurrent requests.

    Instants are integer nanoseconds taken from ``clock`` (defaults to
    ``time.perf_counter_ns``). ``None`` marks an instant that was never set.

    Example:
        recorder = TimingRecorder()
        extensions = instrument({}, recorder)
        # ... send the request with these extensions, drain the body ...
        recorder.finalize()
        print(recorder.server_processing)
    """

    def __init__(self, clock: Callable[[], int] = time.perf_counter_ns):
        self._clock = clock

        # Phase durations
        self.dns_lookup: timedelta = ZERO
        self.tcp_connection: timedelta = ZERO
        self.tls_handshake: timedelta = ZERO
        self.server_processing: timedelta = ZERO
        self.content_transfer: Optional[timedelta] = None

        # Timeline, measured from dns_start
        self.name_lookup: timedelta = ZERO
        self.connect: timedelta = ZERO
        self.pretransfer: timedelta = ZERO
        self.start_transfer: timedelta = ZERO
        self.total: Optional[timedelta] = None

        self.dns_start: Optional[int] = None
        self.tcp_start: Optional[int] = None
        self.tls_start: Optional[int] = None
        self.server_start: Optional[int] = None
        self.server_done: Optional[int] = None
        self.transfer_start: Optional[int] = None

        # True once a TLS handshake has started on the connection
        self.is_tls = False
        # True when the connection came from the keep-alive pool
        self.is_reused = False

    def record_dns_start(self) -> None:
        """Mark the start of name resolution"""
        self.dns_start = self._clock()

    def record_dns_done(self) -> None:
        """Mark the end of name resolution"""
        now = self._clock()
        self.dns_lookup = _span(self.dns_start, now)
        self.name_lookup = _span(self.dns_start, now)

    def record_connect_start(self) -> None:
        """
        Mark the start of the TCP connect.

        Connecting straight to an IP address skips name resolution, in which
        case the connect instant also becomes the timeline anchor.
        """
        self.tcp_start = self._clock()
        if self.dns_start is None:
            self.dns_start = self.tcp_start

    def record_connect_done(self) -> None:
        """Mark the TCP connection as established"""
        now = self._clock()
        self.tcp_connection = _span(self.tcp_start, now)
        self.connect = _span(self.dns_start, now)

    def record_tls_start(self) -> None:
        """Mark the start of the TLS handshake"""
        self.is_tls = True
        self.tls_start = self._clock()

    def record_tls_done(self) -> None:
        """Mark the end of the TLS handshake"""
        now = self._clock()
        self.tls_handshake = _span(self.tls_start, now)
        self.pretransfer = _span(self.dns_start, now)

    def record_connection_obtained(self, reused: bool) -> None:
        """
        Note how the connection for this request was obtained.

        The reuse correction itself happens in ``record_request_written``.

        Args:
            reused: Whether the connection came from the keep-alive pool
        """
        if reused:
            self.is_reused = True

    def record_request_written(self) -> None:
        """
        Mark the request as fully written and reconcile skipped phases.

        - No DNS or connect event fired at all (hooks never called): anchor
          the timeline on the request-written instant.
        - Reused connection: DNS, connect and TLS never happen for this
          request, so all three collapse onto the request-written instant.
        - Plain-text connection: no handshake, so the pre-transfer marker is
          the connect marker.
        """
        self.server_start = self._clock()

        if self.dns_start is None and self.tcp_start is None:
            self.dns_start = self.server_start
            self.tcp_start = self.server_start

        if self.is_reused:
            self.dns_start = self.server_start
            self.tcp_start = self.server_start
            self.tls_start = self.server_start

        if not self.is_tls:
            self.tls_handshake = ZERO
            self.pretransfer = self.connect

    def record_first_response_byte(self) -> None:
        """Mark the arrival of the response, where content transfer starts"""
        now = self._clock()
        self.server_done = now
        self.transfer_start = now
        self.server_processing = _span(self.server_start, now)
        self.start_transfer = _span(self.dns_start, now)

    def finalize(self, now: Optional[int] = None) -> None:
        """
        Fix content transfer and total time.

        Must be called after the response body has been read; calling it
        earlier understates the transfer time. Does nothing when no event was
        ever recorded, so an empty result never reports durations measured
        from the clock epoch.

        Args:
            now: Completion instant in nanoseconds, defaults to the clock
        """
        if self.dns_start is None:
            return
        if now is None:
            now = self._clock()
        self.content_transfer = _span(self.transfer_start, now)
        self.total = _span(self.dns_start, now)

    @property
    def finalized(self) -> bool:
        """Whether ``finalize`` has fixed the transfer and total values"""
        return self.total is not None

    def content_transfer_elapsed(self) -> timedelta:
        """
        Get content transfer time

        Returns:
            timedelta: The finalized value, or the time since the first
            response byte when the request is still in flight
        """
        if self.content_transfer is not None:
            return self.content_transfer
        return _span(self.server_done, self._clock())

    def total_elapsed(self) -> timedelta:
        """
        Get total request time

        Returns:
            timedelta: The finalized value, or the time since the request
            started when it is still in flight
        """
        if self.total is not None:
            return self.total
        return _span(self.dns_start, self._clock())

    def until(self, instant: int) -> timedelta:
        """Duration from the start of the request to ``instant`` (nanoseconds)."""
        return _span(self.dns_start, instant)

    def durations(self) -> dict[str, Optional[timedelta]]:
        """
        Get all phase durations and timeline markers

        Returns:
            dict: Ten named values in display order; ContentTransfer and Total
            are None until the recorder is finalized
        """
        return {
            "DNSLookup": self.dns_lookup,
            "TCPConnection": self.tcp_connection,
            "TLSHandshake": self.tls_handshake,
            "ServerProcessing": self.server_processing,
            "ContentTransfer": self.content_transfer,
            "NameLookup": self.name_lookup,
            "Connect": self.connect,
            "Pretransfer": self.pretransfer,
            "StartTransfer": self.start_transfer,
            "Total": self.total,
        }

"""
Timing Report Model

Serializable snapshot of a TimingRecorder, with every duration in milliseconds.
"""

from datetime import timedelta
from typing import Optional

from pydantic import BaseModel, Field

from httpstat.recorder import TimingRecorder


def _ms(value: Optional[timedelta]) -> Optional[float]:
    if value is None:
        return None
    return value / timedelta(milliseconds=1)


class TimingReport(BaseModel):
    """Latency breakdown of one request"""

    # Phase durations (ms)
    dns_lookup_ms: float = Field(0.0, description="DNS Lookup")
    tcp_connection_ms: float = Field(0.0, description="TCP Connection")
    tls_handshake_ms: float = Field(0.0, description="TLS Handshake")
    server_processing_ms: float = Field(0.0, description="Server Processing")
    content_transfer_ms: Optional[float] = Field(None, description="Content Transfer, None if unmeasured")

    # Timeline from request start (ms)
    name_lookup_ms: float = Field(0.0, description="Name Lookup")
    connect_ms: float = Field(0.0, description="Connect")
    pretransfer_ms: float = Field(0.0, description="Pre Transfer")
    start_transfer_ms: float = Field(0.0, description="Start Transfer")
    total_ms: Optional[float] = Field(None, description="Total, None if unmeasured")

    is_tls: bool = Field(False, description="Connection used TLS")
    is_reused: bool = Field(False, description="Connection was reused")
    finalized: bool = Field(False, description="Body drained and recorder finalized")

    @classmethod
    def from_recorder(cls, recorder: TimingRecorder) -> "TimingReport":
        """Build a report from the recorder's current state."""
        return cls(
            dns_lookup_ms=_ms(recorder.dns_lookup),
            tcp_connection_ms=_ms(recorder.tcp_connection),
            tls_handshake_ms=_ms(recorder.tls_handshake),
            server_processing_ms=_ms(recorder.server_processing),
            content_transfer_ms=_ms(recorder.content_transfer),
            name_lookup_ms=_ms(recorder.name_lookup),
            connect_ms=_ms(recorder.connect),
            pretransfer_ms=_ms(recorder.pretransfer),
            start_transfer_ms=_ms(recorder.start_transfer),
            total_ms=_ms(recorder.total),
            is_tls=recorder.is_tls,
            is_reused=recorder.is_reused,
            finalized=recorder.finalized,
        )

"""
httpstat

Latency breakdown (DNS lookup, TCP connection, TLS handshake, server
processing, content transfer) of a single HTTP request made with httpx.
"""

__version__ = "0.1.0"

from .recorder import TimingRecorder
from .tracing import instrument, instrument_async
from .report import TimingReport
from .formatting import format_compact, format_json, format_table, render
from .client import MeasuredResponse, ameasure, measure
from .errors import HttpStatError, RequestFailedError, RequestTimeoutError

__all__ = [
    # Core
    "TimingRecorder",
    "instrument",
    "instrument_async",
    # Output
    "TimingReport",
    "format_table",
    "format_compact",
    "format_json",
    "render",
    # Requests
    "measure",
    "ameasure",
    "MeasuredResponse",
    # Exceptions
    "HttpStatError",
    "RequestFailedError",
    "RequestTimeoutError",
]

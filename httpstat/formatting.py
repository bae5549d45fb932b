"""
Report Formatting

Renders a TimingReport as a fixed-width table, a compact one-line list, or
JSON. Values that were never measured are shown as "-", never as 0.
"""

from typing import Optional, get_args

from httpstat.config import OutputFormat
from httpstat.report import TimingReport

UNMEASURED = "-"

FORMATS = get_args(OutputFormat)

_PHASES = (
    ("DNS lookup", "DNSLookup", "dns_lookup_ms"),
    ("TCP connection", "TCPConnection", "tcp_connection_ms"),
    ("TLS handshake", "TLSHandshake", "tls_handshake_ms"),
    ("Server processing", "ServerProcessing", "server_processing_ms"),
    ("Content transfer", "ContentTransfer", "content_transfer_ms"),
)

_TIMELINE = (
    ("Name Lookup", "NameLookup", "name_lookup_ms"),
    ("Connect", "Connect", "connect_ms"),
    ("Pre Transfer", "Pretransfer", "pretransfer_ms"),
    ("Start Transfer", "StartTransfer", "start_transfer_ms"),
    ("Total", "Total", "total_ms"),
)


def _display(value: Optional[float]) -> str:
    # Whole milliseconds, truncated
    if value is None:
        return UNMEASURED
    return str(int(value))


def _block(rows: tuple, report: TimingReport) -> list[str]:
    width = max(len(label) for label, _, _ in rows) + 2
    return [
        f"{label + ':':<{width}}{_display(getattr(report, attr)):>4} ms"
        for label, _, attr in rows
    ]


def format_table(report: TimingReport) -> str:
    """
    Render the human-readable table

    Phase durations first, then a blank line, then the timeline.

    Args:
        report: Report to render

    Returns:
        str: Multi-line table
    """
    lines = _block(_PHASES, report) + [""] + _block(_TIMELINE, report)
    return "\n".join(lines)


def format_compact(report: TimingReport) -> str:
    """Render all ten values as ``Key: value ms`` joined by commas."""
    return ", ".join(
        f"{key}: {_display(getattr(report, attr))} ms"
        for _, key, attr in _PHASES + _TIMELINE
    )


def format_json(report: TimingReport) -> str:
    return report.model_dump_json(indent=2)


def render(report: TimingReport, fmt: str = "table") -> str:
    """
    Render a report in the requested format

    Args:
        report: Report to render
        fmt: One of "table", "compact", "json"

    Returns:
        str: Rendered text

    Raises:
        ValueError: If the format is unknown
    """
    if fmt == "table":
        return format_table(report)
    if fmt == "compact":
        return format_compact(report)
    if fmt == "json":
        return format_json(report)
    raise ValueError(f"Unknown output format: {fmt!r} (expected one of {', '.join(FORMATS)})")

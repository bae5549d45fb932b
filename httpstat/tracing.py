"""
Trace Event Binder

Hooks a TimingRecorder into httpx through the per-request ``trace`` extension.
httpcore calls the trace callback as ``trace(event_name, info)`` around every
connection and protocol step, e.g. ``connection.connect_tcp.started`` or
``http11.receive_response_headers.complete``.
"""

import logging
from typing import Any, Callable, Mapping, Optional

from httpstat.recorder import TimingRecorder

logger = logging.getLogger(__name__)

TRACE_EXTENSION = "trace"


class TraceDispatcher:
    """
    Synchronous trace callback bound to one recorder

    Routes httpcore events to the matching recorder operation. httpcore has
    no "connection acquired" event, so reuse is inferred: if the request
    starts sending headers without a connect event having been seen, the
    connection came from the pool.
    """

    def __init__(
        self,
        recorder: TimingRecorder,
        chained: Optional[Callable[[str, dict[str, Any]], Any]] = None,
    ):
        self.recorder = recorder
        self.chained = chained
        self._connect_seen = False
        self._connection_obtained = False

        self._routes: dict[str, Callable[[], None]] = {
            "dns.lookup.started": recorder.record_dns_start,
            "dns.lookup.complete": recorder.record_dns_done,
            "connection.connect_tcp.started": self._on_connect_start,
            "connection.connect_tcp.complete": recorder.record_connect_done,
            "connection.connect_unix_socket.started": self._on_connect_start,
            "connection.connect_unix_socket.complete": recorder.record_connect_done,
            "connection.start_tls.started": recorder.record_tls_start,
            "connection.start_tls.complete": recorder.record_tls_done,
        }
        for protocol in ("http11", "http2"):
            self._routes.update({
                f"{protocol}.send_request_headers.started": self._on_send_headers,
                f"{protocol}.send_request_body.complete": recorder.record_request_written,
                f"{protocol}.receive_response_headers.complete": recorder.record_first_response_byte,
            })

    def _on_connect_start(self) -> None:
        self._connect_seen = True
        self.recorder.record_connect_start()

    def _on_send_headers(self) -> None:
        if self._connection_obtained:
            return
        self._connection_obtained = True
        self.recorder.record_connection_obtained(reused=not self._connect_seen)

    def dispatch(self, event_name: str, info: dict[str, Any]) -> None:
        """
        Route a single trace event

        Args:
            event_name: httpcore event name ("<prefix>.<step>.<phase>")
            info: Event payload; only inspected for failures
        """
        if event_name.endswith(".failed"):
            logger.debug("trace %s: %r", event_name, info.get("exception"))
            return

        handler = self._routes.get(event_name)
        if handler is None:
            return
        logger.debug("trace %s", event_name)
        handler()

    def __call__(self, event_name: str, info: dict[str, Any]) -> None:
        if self.chained is not None:
            self.chained(event_name, info)
        self.dispatch(event_name, info)


class AsyncTraceDispatcher(TraceDispatcher):
    """Trace callback for httpx.AsyncClient, which awaits the callback"""

    async def __call__(self, event_name: str, info: dict[str, Any]) -> None:
        if self.chained is not None:
            await self.chained(event_name, info)
        self.dispatch(event_name, info)


def instrument(
    extensions: Optional[Mapping[str, Any]],
    recorder: TimingRecorder,
) -> dict[str, Any]:
    """
    Create request extensions that feed ``recorder``

    The given mapping is copied, not modified. A ``trace`` callback already
    present is kept and called before the recorder sees each event.

    Args:
        extensions: Existing request extensions (may be None)
        recorder: Recorder for this request only

    Returns:
        dict: New extensions to pass to ``httpx.Client.build_request``
    """
    new_extensions = dict(extensions or {})
    new_extensions[TRACE_EXTENSION] = TraceDispatcher(
        recorder, chained=new_extensions.get(TRACE_EXTENSION)
    )
    return new_extensions


def instrument_async(
    extensions: Optional[Mapping[str, Any]],
    recorder: TimingRecorder,
) -> dict[str, Any]:
    """Same as ``instrument`` for ``httpx.AsyncClient`` requests."""
    new_extensions = dict(extensions or {})
    new_extensions[TRACE_EXTENSION] = AsyncTraceDispatcher(
        recorder, chained=new_extensions.get(TRACE_EXTENSION)
    )
    return new_extensions

"""
Measured HTTP Requests

Issues a single instrumented request with httpx, drains the response body and
finalizes the recorder. Both the sync (httpx.Client) and async
(httpx.AsyncClient) interfaces are supported.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from httpstat.config import get_settings
from httpstat.errors import RequestFailedError, RequestTimeoutError
from httpstat.recorder import TimingRecorder
from httpstat.report import TimingReport
from httpstat.tracing import instrument, instrument_async

logger = logging.getLogger(__name__)


@dataclass
class MeasuredResponse:
    """
    Measured Response Data Class

    The response metadata of one request together with its timing recorder.
    The body itself is drained and discarded; only its size is kept.
    """

    # HTTP status code
    status_code: int
    # Negotiated protocol, e.g. "HTTP/1.1"
    http_version: str
    # Final request URL
    url: str
    # Response headers
    headers: dict[str, str] = field(default_factory=dict)
    # Number of (decoded) body bytes read
    body_size: int = 0
    # Recorder holding the timing of this request
    recorder: TimingRecorder = field(default_factory=TimingRecorder)

    @property
    def report(self) -> TimingReport:
        """Timing report of this request"""
        return TimingReport.from_recorder(self.recorder)


def _client_options(timeout: Optional[float], verify: Optional[bool]) -> dict[str, Any]:
    settings = get_settings()
    return {
        "timeout": httpx.Timeout(timeout if timeout is not None else settings.HTTP_TIMEOUT),
        "verify": settings.VERIFY_TLS if verify is None else verify,
        "headers": {"User-Agent": settings.USER_AGENT},
    }


def _request_failed(exc: Exception, url: str) -> RequestFailedError:
    if isinstance(exc, httpx.TimeoutException):
        return RequestTimeoutError(f"Request timed out: {exc}", url=url)
    return RequestFailedError(
        f"Request failed: {exc}",
        url=url,
        details={"exception": type(exc).__name__},
    )


def _request_options(timeout: Optional[float], owns_client: bool) -> dict[str, Any]:
    # An owned client already carries the timeout; a given one only gets it per request
    if timeout is None or owns_client:
        return {}
    return {"timeout": timeout}


def _measured(response: httpx.Response, body_size: int, recorder: TimingRecorder) -> MeasuredResponse:
    return MeasuredResponse(
        status_code=response.status_code,
        http_version=response.http_version,
        url=str(response.url),
        headers=dict(response.headers),
        body_size=body_size,
        recorder=recorder,
    )


def measure(
    url: str,
    *,
    method: str = "GET",
    headers: Optional[dict[str, str]] = None,
    content: Optional[bytes] = None,
    timeout: Optional[float] = None,
    verify: Optional[bool] = None,
    client: Optional[httpx.Client] = None,
    recorder: Optional[TimingRecorder] = None,
) -> MeasuredResponse:
    """
    Send one request and measure its latency breakdown

    Redirects are not followed: a recorder covers exactly one request.

    Args:
        url: Request URL
        method: HTTP method
        headers: Extra request headers
        content: Raw request body
        timeout: Timeout (seconds), defaults to configuration, or to the
            given client's own timeout
        verify: Verify TLS certificates, defaults to configuration. Ignored
            for a given client, which keeps its own TLS settings
        client: Client to send with; left open. A new one is created and
            closed when omitted
        recorder: Fresh recorder to fill, e.g. to poll it from another task

    Returns:
        MeasuredResponse: Response metadata and finalized recorder

    Raises:
        RequestFailedError: If the request or the body read fails
        RequestTimeoutError: If the request times out
    """
    if recorder is None:
        recorder = TimingRecorder()
    owns_client = client is None
    if client is None:
        client = httpx.Client(**_client_options(timeout, verify))

    logger.debug("Measuring %s %s", method, url)
    try:
        request = client.build_request(
            method,
            url,
            headers=headers,
            content=content,
            extensions=instrument(None, recorder),
            **_request_options(timeout, owns_client),
        )
        response = client.send(request, stream=True, follow_redirects=False)
        try:
            body_size = 0
            for chunk in response.iter_bytes():
                body_size += len(chunk)
            recorder.finalize()
        finally:
            response.close()
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.warning("Request to %s failed: %s", url, e)
        raise _request_failed(e, url) from e
    finally:
        if owns_client:
            client.close()

    logger.debug("Measured %s %s -> %s (%d bytes)", method, url, response.status_code, body_size)
    return _measured(response, body_size, recorder)


async def ameasure(
    url: str,
    *,
    method: str = "GET",
    headers: Optional[dict[str, str]] = None,
    content: Optional[bytes] = None,
    timeout: Optional[float] = None,
    verify: Optional[bool] = None,
    client: Optional[httpx.AsyncClient] = None,
    recorder: Optional[TimingRecorder] = None,
) -> MeasuredResponse:
    """
    Async variant of ``measure`` using httpx.AsyncClient

    Returns:
        MeasuredResponse: Response metadata and finalized recorder
    """
    if recorder is None:
        recorder = TimingRecorder()
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(**_client_options(timeout, verify))

    logger.debug("Measuring %s %s", method, url)
    try:
        request = client.build_request(
            method,
            url,
            headers=headers,
            content=content,
            extensions=instrument_async(None, recorder),
            **_request_options(timeout, owns_client),
        )
        response = await client.send(request, stream=True, follow_redirects=False)
        try:
            body_size = 0
            async for chunk in response.aiter_bytes():
                body_size += len(chunk)
            recorder.finalize()
        finally:
            await response.aclose()
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.warning("Request to %s failed: %s", url, e)
        raise _request_failed(e, url) from e
    finally:
        if owns_client:
            await client.aclose()

    logger.debug("Measured %s %s -> %s (%d bytes)", method, url, response.status_code, body_size)
    return _measured(response, body_size, recorder)

"""
aiohttp Transport
=================

Default HTTP transport backed by a lazily created aiohttp session.
Executes plain requests, file uploads and in-memory uploads.
"""

import asyncio
from pathlib import Path
from typing import Optional, Any, Dict

import aiohttp

from urlqueue.config.logging import get_logger
from urlqueue.config.settings import get_settings
from urlqueue.core.exceptions import HTTPStatusError, TransportError
from urlqueue.models.schemas import (
    DataRequest,
    DataUpload,
    FileUpload,
    QueuePayload,
    ResponseMetadata,
)

from .base import Transport, TransportResult

logger = get_logger(__name__)


class AiohttpTransport(Transport):
    """Transport that performs requests through an aiohttp ClientSession."""

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        raise_for_status: Optional[bool] = None,
    ):
        self.settings = get_settings()
        self.logger: Any = logger.bind(component="aiohttp_transport")  # structlog.BoundLoggerBase
        self.raise_for_status = (
            self.settings.raise_for_status if raise_for_status is None else raise_for_status
        )
        self._session = session
        self._own_session = session is None
        self._session_loop: Optional[asyncio.AbstractEventLoop] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session bound to the running event loop."""
        loop = asyncio.get_running_loop()
        if (
            self._session is not None
            and self._own_session
            and self._session_loop is not None
            and self._session_loop is not loop
        ):
            # Sessions cannot outlive their loop; the old one is dropped unclosed.
            self.logger.debug("Session bound to another event loop, creating new session")
            self._session = None

        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(
                total=self.settings.request_timeout, connect=self.settings.connect_timeout
            )
            self._session = aiohttp.ClientSession(
                timeout=timeout, headers={"User-Agent": self.settings.user_agent}
            )
            self._own_session = True
            self._session_loop = loop
        return self._session

    async def close(self) -> None:
        """Close the HTTP session if this transport created it."""
        if self._own_session and self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def execute(self, payload: QueuePayload) -> TransportResult:
        """Perform one attempt; failures are returned, never raised."""
        request = payload.request
        try:
            body = await self._resolve_body(payload)
        except OSError as e:
            self.logger.warning("Upload file unreadable", url=request.url, error=str(e))
            return TransportResult(error=TransportError(f"Cannot read upload file: {e}", url=request.url))

        method = request.method
        if not isinstance(payload, DataRequest) and method in ("GET", "HEAD"):
            method = "POST"

        options: Dict[str, Any] = {}
        if request.timeout is not None:
            options["timeout"] = aiohttp.ClientTimeout(total=request.timeout)

        try:
            session = await self._get_session()
            async with session.request(
                method,
                request.url,
                headers=request.headers or None,
                params=request.params or None,
                data=body,
                **options,
            ) as response:
                data = await response.read()
                metadata = _response_metadata(response)
        except asyncio.TimeoutError:
            self.logger.warning("Request timed out", method=method, url=request.url)
            return TransportResult(error=TransportError("Request timed out", url=request.url))
        except aiohttp.ClientError as e:
            self.logger.warning("Request failed", method=method, url=request.url, error=str(e))
            return TransportResult(
                error=TransportError(f"Request failed: {e}", url=request.url)
            )

        self.logger.debug(
            "Request completed",
            method=method,
            url=request.url,
            status=metadata.status,
            size=len(data),
        )

        if self.raise_for_status and metadata.status >= 400:
            return TransportResult(
                data=data,
                response=metadata,
                error=HTTPStatusError(metadata.status, url=metadata.url, reason=metadata.reason),
            )
        return TransportResult(data=data, response=metadata)

    async def _resolve_body(self, payload: QueuePayload) -> Optional[bytes]:
        if isinstance(payload, FileUpload):
            return await asyncio.to_thread(Path(payload.file_path).read_bytes)
        if isinstance(payload, DataUpload):
            return payload.data
        return payload.request.body


def _response_metadata(response: aiohttp.ClientResponse) -> ResponseMetadata:
    """Build response metadata from an aiohttp response."""
    return ResponseMetadata(
        status=response.status,
        url=str(response.url),
        reason=response.reason,
        headers={k: v for k, v in response.headers.items()},
        content_type=response.content_type or None,
        content_length=response.content_length,
    )

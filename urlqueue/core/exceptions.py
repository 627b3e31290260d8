"""
Exceptions
==========

Error types raised by the queue and reported by transports.
"""

from typing import Optional


class UrlQueueError(Exception):
    """Base exception for urlqueue."""

    pass


class QueueConfigurationError(UrlQueueError):
    """Exception raised when a queue is constructed or used against its contract."""

    pass


class TransportError(UrlQueueError):
    """Exception reported when a request attempt fails at the transport level."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class HTTPStatusError(TransportError):
    """Exception reported when the server answers with a non-success status."""

    def __init__(self, status: int, url: Optional[str] = None, reason: Optional[str] = None):
        super().__init__(f"HTTP {status}{f' {reason}' if reason else ''} for {url}", url=url)
        self.status = status
        self.reason = reason

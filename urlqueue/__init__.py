"""
urlqueue
========

Bounded-concurrency HTTP request queue with automatic retries.
"""

from urlqueue.core.exceptions import (
    HTTPStatusError,
    QueueConfigurationError,
    TransportError,
    UrlQueueError,
)
from urlqueue.core.queue import (
    TaskHandle,
    UrlQueue,
    close_shared_queue,
    get_shared_queue,
    reset_shared_queue,
)
from urlqueue.core.transport import AiohttpTransport, Transport, TransportResult
from urlqueue.models.schemas import (
    DataRequest,
    DataUpload,
    FileUpload,
    HttpRequest,
    PayloadKind,
    QueueStats,
    ResponseMetadata,
    TaskState,
)

__version__ = "1.0.0"

__all__ = [
    "AiohttpTransport",
    "DataRequest",
    "DataUpload",
    "FileUpload",
    "HTTPStatusError",
    "HttpRequest",
    "PayloadKind",
    "QueueConfigurationError",
    "QueueStats",
    "ResponseMetadata",
    "TaskHandle",
    "TaskState",
    "Transport",
    "TransportError",
    "TransportResult",
    "UrlQueue",
    "UrlQueueError",
    "close_shared_queue",
    "get_shared_queue",
    "reset_shared_queue",
]

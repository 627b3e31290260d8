"""
Transport Contract
==================

The interface the dispatch queue consumes. A transport performs exactly one
request per ``execute`` call and reports the outcome as a ``TransportResult``.
Transports do not limit concurrency; the queue does.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from urlqueue.models.schemas import QueuePayload, ResponseMetadata


@dataclass(frozen=True)
class TransportResult:
    """Outcome of one attempt."""

    data: bytes = b""
    response: Optional[ResponseMetadata] = None
    error: Optional[BaseException] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class Transport(ABC):
    """Performs a single request or upload."""

    @abstractmethod
    async def execute(self, payload: QueuePayload) -> TransportResult:
        """
        Perform one attempt for the payload.

        Per-request failures are reported through ``TransportResult.error``
        rather than raised.
        """

    async def close(self) -> None:
        """Release any held resources."""
        return None

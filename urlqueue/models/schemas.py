"""
Pydantic Models and Schemas
===========================

Request descriptors, queue payloads, response metadata and queue snapshots.
Payload models are frozen: a submitted payload never changes.
"""

from typing import Optional, Dict, Union, Literal
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Enums
class TaskState(str, Enum):
    """Lifecycle state of a queued task."""
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"


class PayloadKind(str, Enum):
    """Shape of a queued payload."""
    DATA_REQUEST = "data_request"
    FILE_UPLOAD = "file_upload"
    DATA_UPLOAD = "data_upload"


# Request Models
class HttpRequest(BaseModel):
    """A single HTTP request description."""
    model_config = ConfigDict(frozen=True)

    url: str = Field(..., description="Absolute http(s) URL")
    method: str = Field("GET", description="HTTP method")
    headers: Dict[str, str] = Field(default_factory=dict, description="Request headers")
    params: Dict[str, str] = Field(default_factory=dict, description="Query parameters")
    body: Optional[bytes] = Field(None, description="Request body for plain requests")
    timeout: Optional[float] = Field(None, gt=0, description="Per-request total timeout in seconds")

    @field_validator("method")
    @classmethod
    def normalize_method(cls, v: str) -> str:
        """Upper-case and validate the method token."""
        v = v.strip().upper()
        if not v.isalpha():
            raise ValueError(f"Invalid HTTP method: {v!r}")
        return v

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Only absolute http and https URLs are accepted."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return v


class DataRequest(BaseModel):
    """Plain request whose response body is fetched."""
    model_config = ConfigDict(frozen=True)

    kind: Literal[PayloadKind.DATA_REQUEST] = PayloadKind.DATA_REQUEST
    request: HttpRequest


class FileUpload(BaseModel):
    """Upload whose body is read from a file at dispatch time."""
    model_config = ConfigDict(frozen=True)

    kind: Literal[PayloadKind.FILE_UPLOAD] = PayloadKind.FILE_UPLOAD
    request: HttpRequest
    file_path: Path


class DataUpload(BaseModel):
    """Upload whose body is held in memory."""
    model_config = ConfigDict(frozen=True)

    kind: Literal[PayloadKind.DATA_UPLOAD] = PayloadKind.DATA_UPLOAD
    request: HttpRequest
    data: bytes


QueuePayload = Union[DataRequest, FileUpload, DataUpload]

PAYLOAD_TYPES = (DataRequest, FileUpload, DataUpload)


# Response Models
class ResponseMetadata(BaseModel):
    """Response details reported by the transport for one attempt."""
    model_config = ConfigDict(frozen=True)

    status: int = Field(..., description="HTTP status code")
    url: str = Field(..., description="Final URL after redirects")
    reason: Optional[str] = Field(None, description="HTTP reason phrase")
    headers: Dict[str, str] = Field(default_factory=dict)
    content_type: Optional[str] = None
    content_length: Optional[int] = None

    @property
    def ok(self) -> bool:
        """True for 2xx and 3xx statuses."""
        return 200 <= self.status < 400


class QueueStats(BaseModel):
    """Point-in-time snapshot of a queue's counters."""
    name: str
    concurrency_limit: int
    active: int
    backlog: int
    completed: int
    total: int
    taken_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def pending(self) -> int:
        """Tasks not yet completed."""
        return self.active + self.backlog

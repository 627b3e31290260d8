"""
Queued Tasks
============

The queue's internal task record and the read-only handle given to callers.
"""

from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional, Union
import uuid

from urlqueue.models.schemas import (
    HttpRequest,
    PayloadKind,
    QueuePayload,
    ResponseMetadata,
    TaskState,
)

# Attempt callbacks start in attempt order; coroutine callbacks of one task may overlap.
ProgressCallback = Callable[
    [bytes, Optional[ResponseMetadata], Optional[BaseException], bool],
    Union[None, Awaitable[None]],
]


class QueuedTask:
    """
    One submitted payload plus its retry and callback bookkeeping.

    Only the owning queue mutates a task, always inside its critical section.
    """

    __slots__ = (
        "id",
        "payload",
        "max_attempts",
        "attempts_made",
        "state",
        "succeeded",
        "on_progress",
        "submitted_at",
        "completed_at",
    )

    def __init__(self, payload: QueuePayload, max_attempts: int, on_progress: ProgressCallback):
        self.id = str(uuid.uuid4())
        self.payload = payload
        self.max_attempts = max_attempts
        self.attempts_made = 0
        self.state = TaskState.PENDING
        self.succeeded: Optional[bool] = None
        self.on_progress: Optional[ProgressCallback] = on_progress
        self.submitted_at = datetime.now(timezone.utc)
        self.completed_at: Optional[datetime] = None

    @property
    def unlimited(self) -> bool:
        return self.max_attempts <= 0

    def has_attempts_left(self) -> bool:
        return self.unlimited or self.attempts_made < self.max_attempts

    def finish(self, succeeded: bool) -> None:
        self.state = TaskState.COMPLETED
        self.succeeded = succeeded
        self.completed_at = datetime.now(timezone.utc)

    def __repr__(self) -> str:
        return (
            f"QueuedTask(id={self.id!r}, kind={self.payload.kind.value}, "
            f"state={self.state.value}, attempts={self.attempts_made}/{self.max_attempts})"
        )


class TaskHandle:
    """
    Read-only view of a queued task, for monitoring.

    The queue decides when a task starts, retries and completes; a handle
    only reports what the queue has done.
    """

    __slots__ = ("_task",)

    def __init__(self, task: QueuedTask):
        self._task = task

    @property
    def id(self) -> str:
        return self._task.id

    @property
    def kind(self) -> PayloadKind:
        return self._task.payload.kind

    @property
    def payload(self) -> QueuePayload:
        return self._task.payload

    @property
    def request(self) -> HttpRequest:
        return self._task.payload.request

    @property
    def state(self) -> TaskState:
        return self._task.state

    @property
    def attempts_made(self) -> int:
        return self._task.attempts_made

    @property
    def max_attempts(self) -> int:
        return self._task.max_attempts

    @property
    def succeeded(self) -> Optional[bool]:
        """None until completed; False when attempts were exhausted."""
        return self._task.succeeded

    @property
    def is_completed(self) -> bool:
        return self._task.state is TaskState.COMPLETED

    @property
    def submitted_at(self) -> datetime:
        return self._task.submitted_at

    @property
    def completed_at(self) -> Optional[datetime]:
        return self._task.completed_at

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, TaskHandle) and other._task is self._task

    def __hash__(self) -> int:
        return hash(self._task.id)

    def __repr__(self) -> str:
        return f"TaskHandle(id={self.id!r}, state={self.state.value}, attempts={self.attempts_made})"

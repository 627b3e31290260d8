"""
Dispatch Queue
==============

Bounded-concurrency dispatcher for HTTP requests and uploads.

Submitted tasks are dispatched in strict arrival order, never more than
``concurrency_limit`` at a time, and failed attempts are re-enqueued until
the task's attempt bound is reached. The caller's callback fires once per
attempt.
"""

from collections import deque
from pathlib import Path
from typing import Any, Deque, Optional, Set, Union
import asyncio
import inspect
import threading

from urlqueue.config.logging import get_logger
from urlqueue.config.settings import get_settings
from urlqueue.core.exceptions import QueueConfigurationError, TransportError
from urlqueue.core.transport import AiohttpTransport, Transport, TransportResult
from urlqueue.models.schemas import (
    PAYLOAD_TYPES,
    DataRequest,
    DataUpload,
    FileUpload,
    HttpRequest,
    QueuePayload,
    QueueStats,
    TaskState,
)

from .task import ProgressCallback, QueuedTask, TaskHandle

logger = get_logger(__name__)


class UrlQueue:
    """
    Dispatch queue that admits at most ``concurrency_limit`` attempts at once.

    A limit of 0 means unbounded: every task dispatches on submission. All
    counter and backlog mutations happen under one lock; transport calls run
    as asyncio tasks on the running event loop.
    """

    def __init__(
        self,
        concurrency_limit: Optional[int] = None,
        transport: Optional[Transport] = None,
        *,
        name: str = "default",
        requeue_retries_at_head: bool = False,
    ):
        self.settings = get_settings()
        if concurrency_limit is None:
            concurrency_limit = self.settings.default_concurrency_limit
        if isinstance(concurrency_limit, bool) or not isinstance(concurrency_limit, int):
            raise QueueConfigurationError(
                f"concurrency_limit must be an int, got {type(concurrency_limit).__name__}"
            )
        if concurrency_limit < 0:
            raise QueueConfigurationError(
                f"concurrency_limit must be >= 0, got {concurrency_limit}"
            )

        self.name = name
        self.requeue_retries_at_head = requeue_retries_at_head
        self._limit = concurrency_limit
        self._transport = transport if transport is not None else AiohttpTransport()
        self.logger: Any = logger.bind(component="url_queue", queue=name)  # structlog.BoundLoggerBase

        self._lock = threading.Lock()
        self._backlog: Deque[QueuedTask] = deque()
        self._active = 0
        self._submitted = 0
        self._completed = 0
        # Strong references keep in-flight attempts from being collected
        self._in_flight: Set["asyncio.Task[None]"] = set()

    @property
    def concurrency_limit(self) -> int:
        return self._limit

    @property
    def transport(self) -> Transport:
        return self._transport

    # Submission

    def submit(
        self,
        payload: QueuePayload,
        on_progress: ProgressCallback,
        max_attempts: Optional[int] = None,
    ) -> TaskHandle:
        """
        Queue a payload for dispatch.

        Callbacks for successive attempts of one task start in attempt order.
        A retry is dispatched before the failed attempt's callback runs, so a
        coroutine callback may still be suspended when the next attempt's
        callback starts.

        Args:
            payload: DataRequest, FileUpload or DataUpload
            on_progress: Called after every attempt with
                ``(data, response, error, is_retrying)``; may be a coroutine function
            max_attempts: Attempt bound; ``<= 0`` retries until success.
                Defaults to the ``default_max_attempts`` setting.

        Returns:
            Read-only handle for monitoring the task

        Raises:
            TypeError: If the payload shape, callback or attempt bound is invalid
            QueueConfigurationError: If called without a running event loop
        """
        if not isinstance(payload, PAYLOAD_TYPES):
            raise TypeError(
                f"payload must be DataRequest, FileUpload or DataUpload, got {type(payload).__name__}"
            )
        if not callable(on_progress):
            raise TypeError("on_progress must be callable")
        if max_attempts is None:
            max_attempts = self.settings.default_max_attempts
        if isinstance(max_attempts, bool) or not isinstance(max_attempts, int):
            raise TypeError(f"max_attempts must be an int, got {type(max_attempts).__name__}")

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            raise QueueConfigurationError(
                "UrlQueue.submit must be called from a running event loop"
            ) from None

        task = QueuedTask(payload, max_attempts, on_progress)
        with self._lock:
            self._submitted += 1
            self._backlog.append(task)
            self._dispatch_available(loop)

        self.logger.debug(
            "Task submitted",
            task_id=task.id,
            kind=payload.kind.value,
            url=payload.request.url,
            max_attempts=max_attempts,
            state=task.state.value,
        )
        return TaskHandle(task)

    def submit_data_request(
        self,
        request: HttpRequest,
        on_progress: ProgressCallback,
        max_attempts: Optional[int] = None,
    ) -> TaskHandle:
        """Queue a plain request whose response body is fetched."""
        return self.submit(DataRequest(request=request), on_progress, max_attempts)

    def submit_file_upload(
        self,
        request: HttpRequest,
        file_path: Union[str, Path],
        on_progress: ProgressCallback,
        max_attempts: Optional[int] = None,
    ) -> TaskHandle:
        """Queue an upload of the file at ``file_path``; the file is read on each attempt."""
        return self.submit(
            FileUpload(request=request, file_path=Path(file_path)), on_progress, max_attempts
        )

    def submit_data_upload(
        self,
        request: HttpRequest,
        data: bytes,
        on_progress: ProgressCallback,
        max_attempts: Optional[int] = None,
    ) -> TaskHandle:
        """Queue an upload of in-memory bytes."""
        return self.submit(DataUpload(request=request, data=data), on_progress, max_attempts)

    # Introspection

    def pending_count(self) -> int:
        """Tasks not yet completed (waiting or in flight)."""
        with self._lock:
            return self._active + len(self._backlog)

    def total_count(self) -> int:
        """Every task ever submitted to this queue."""
        with self._lock:
            return self._submitted

    def completed_count(self) -> int:
        with self._lock:
            return self._completed

    def active_count(self) -> int:
        with self._lock:
            return self._active

    def backlog_count(self) -> int:
        with self._lock:
            return len(self._backlog)

    def is_busy(self) -> bool:
        """True while at least one attempt is in flight."""
        with self._lock:
            return self._active > 0

    def stats(self) -> QueueStats:
        """Consistent snapshot of all counters."""
        with self._lock:
            return QueueStats(
                name=self.name,
                concurrency_limit=self._limit,
                active=self._active,
                backlog=len(self._backlog),
                completed=self._completed,
                total=self._submitted,
            )

    # Dispatch and completion

    def _has_free_slot(self) -> bool:
        return self._limit == 0 or self._active < self._limit

    def _dispatch_available(self, loop: asyncio.AbstractEventLoop) -> None:
        """Admit backlog heads while slots are free. Caller holds the lock."""
        while self._backlog and self._has_free_slot():
            task = self._backlog.popleft()
            task.state = TaskState.ACTIVE
            task.attempts_made += 1
            self._active += 1

            attempt = loop.create_task(
                self._run_attempt(task), name=f"urlqueue-{task.id}-{task.attempts_made}"
            )
            self._in_flight.add(attempt)
            attempt.add_done_callback(self._in_flight.discard)

    async def _run_attempt(self, task: QueuedTask) -> None:
        self.logger.debug(
            "Dispatching task",
            task_id=task.id,
            attempt=task.attempts_made,
            url=task.payload.request.url,
        )
        try:
            result = await self._transport.execute(task.payload)
        except asyncio.CancelledError:
            self._release_interrupted(task)
            raise
        except Exception as e:
            if isinstance(e, TransportError):
                error = e
            else:
                error = TransportError(
                    f"Transport raised {type(e).__name__}: {e}", url=task.payload.request.url
                )
                error.__cause__ = e
            result = TransportResult(error=error)

        retrying = self._complete_attempt(task, result)
        await self._notify(task, result, retrying)

    def _complete_attempt(self, task: QueuedTask, result: TransportResult) -> bool:
        """Record one finished attempt; returns whether the task will be retried."""
        loop = asyncio.get_running_loop()
        with self._lock:
            self._active -= 1
            if not result.failed:
                task.finish(succeeded=True)
                self._completed += 1
                retrying = False
            elif task.has_attempts_left():
                task.state = TaskState.PENDING
                if self.requeue_retries_at_head:
                    self._backlog.appendleft(task)
                else:
                    self._backlog.append(task)
                retrying = True
            else:
                task.finish(succeeded=False)
                self._completed += 1
                retrying = False
            self._dispatch_available(loop)

        if retrying:
            self.logger.info(
                "Attempt failed, task requeued",
                task_id=task.id,
                attempt=task.attempts_made,
                max_attempts=task.max_attempts,
                error=str(result.error),
            )
        elif result.failed:
            self.logger.warning(
                "Task failed, attempts exhausted",
                task_id=task.id,
                attempts=task.attempts_made,
                error=str(result.error),
            )
        else:
            self.logger.debug("Task completed", task_id=task.id, attempts=task.attempts_made)
        return retrying

    def _release_interrupted(self, task: QueuedTask) -> None:
        """
        Free the slot of an attempt cancelled before it produced an outcome.

        This happens when the event loop running the attempt shuts down. The
        task goes back to the head of the backlog, or completes as failed if
        the interrupted attempt was its last. Nothing is dispatched here; the
        next submission on a live loop drains the backlog.
        """
        with self._lock:
            self._active -= 1
            if task.has_attempts_left():
                task.state = TaskState.PENDING
                self._backlog.appendleft(task)
                requeued = True
            else:
                task.finish(succeeded=False)
                task.on_progress = None
                self._completed += 1
                requeued = False

        self.logger.info(
            "Attempt interrupted",
            task_id=task.id,
            attempt=task.attempts_made,
            requeued=requeued,
        )

    async def _notify(self, task: QueuedTask, result: TransportResult, retrying: bool) -> None:
        callback = task.on_progress
        if not retrying:
            task.on_progress = None
        if callback is None:
            return
        try:
            outcome = callback(result.data, result.response, result.error, retrying)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as e:
            self.logger.error(
                "Progress callback raised",
                task_id=task.id,
                attempt=task.attempts_made,
                error=str(e),
                exc_info=True,
            )

    def __repr__(self) -> str:
        return f"UrlQueue(name={self.name!r}, concurrency_limit={self._limit})"


# Shared queue instance
_shared_queue: Optional[UrlQueue] = None
_shared_queue_lock = threading.Lock()


def get_shared_queue() -> UrlQueue:
    """Get or create the process-wide queue (default limit 3, aiohttp transport)."""
    global _shared_queue
    if _shared_queue is None:
        with _shared_queue_lock:
            if _shared_queue is None:
                _shared_queue = UrlQueue(name="shared")
    return _shared_queue


def reset_shared_queue() -> None:
    """Forget the shared queue; the next access creates a fresh one."""
    global _shared_queue
    with _shared_queue_lock:
        _shared_queue = None


async def close_shared_queue() -> None:
    """Close the shared queue's transport and forget the instance."""
    global _shared_queue
    with _shared_queue_lock:
        queue, _shared_queue = _shared_queue, None
    if queue is not None:
        await queue.transport.close()

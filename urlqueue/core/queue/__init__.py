"""
Queue Module
===========

Bounded-concurrency dispatch with per-task retry bookkeeping.

Components:
- dispatch_queue: UrlQueue and the shared queue accessor
- task: Internal task record and read-only task handles
"""

from .dispatch_queue import UrlQueue, get_shared_queue, reset_shared_queue, close_shared_queue
from .task import ProgressCallback, TaskHandle

__all__ = [
    "UrlQueue",
    "get_shared_queue",
    "reset_shared_queue",
    "close_shared_queue",
    "ProgressCallback",
    "TaskHandle",
]

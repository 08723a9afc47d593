"""Console Backend - hand-off between the transport and the UI loop.

The transport receives updates on its own thread and calls ``emit_update``
/ ``emit_task_details``; the UI drains everything queued since the last
frame and applies it on its own thread, so the state engine itself is only
ever touched by one thread.

The backend also records the single detail subscription the UI asked for
(``watch_task_details``) so the transport knows which task's details to
stream.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vigil.wire import TaskDetails, Update

_logger = logging.getLogger(__name__)


class ConsoleBackend:
    """Thread-safe queue of updates and task details.

    Thread-safe: emit_*() can be called from the transport thread while
    drain() is called from the UI thread.
    """

    def __init__(self, max_pending: int = 1000) -> None:
        """Initialize the backend.

        Args:
            max_pending: Maximum queued updates; the oldest are discarded
                when the UI falls behind.
        """
        self._lock = threading.Lock()
        self._updates: deque[Update] = deque(maxlen=max_pending)
        self._details: deque[TaskDetails] = deque(maxlen=max_pending)
        self._watched_task_id: int | None = None
        self._started = False
        self._event_count = 0

    def start(self) -> None:
        self._started = True
        _logger.info("ConsoleBackend started")

    def close(self) -> None:
        self._started = False
        with self._lock:
            self._watched_task_id = None
        _logger.info("ConsoleBackend closed")

    @property
    def connected(self) -> bool:
        return self._started

    @property
    def event_count(self) -> int:
        return self._event_count

    def emit_update(self, update: "Update") -> None:
        if not self._started:
            _logger.warning("ConsoleBackend.emit_update() called before start()")
            return
        with self._lock:
            self._event_count += 1
            self._updates.append(update)

    def emit_task_details(self, details: "TaskDetails") -> None:
        if not self._started:
            _logger.warning("ConsoleBackend.emit_task_details() called before start()")
            return
        with self._lock:
            if details.task_id is None or details.task_id != self._watched_task_id:
                _logger.debug(
                    "dropping details for unwatched task %s (watching %s)",
                    details.task_id,
                    self._watched_task_id,
                )
                return
            self._details.append(details)

    def drain(self) -> tuple[list["Update"], list["TaskDetails"]]:
        """Take everything queued since the last drain, oldest first."""
        with self._lock:
            updates = list(self._updates)
            details = list(self._details)
            self._updates.clear()
            self._details.clear()
        return updates, details

    # Detail subscription

    def watch_task_details(self, task_id: int) -> None:
        with self._lock:
            self._watched_task_id = task_id
            self._details.clear()
        _logger.debug("watching details for task %d", task_id)

    def stop_watching_task_details(self) -> None:
        with self._lock:
            self._watched_task_id = None
            self._details.clear()

    @property
    def watched_task_id(self) -> int | None:
        with self._lock:
            return self._watched_task_id


__all__ = ["ConsoleBackend"]

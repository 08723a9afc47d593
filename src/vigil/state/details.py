"""The shared task-detail slot.

The ingestion path writes the focused task's extended statistics into the
slot; the task detail screen reads them when it renders. Both hold the same
``DetailsRef`` explicitly. Access goes through a lock, so a transport thread
and the UI thread never observe a half-written value.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass

from vigil.state.histogram import DurationHistogram


@dataclass(frozen=True)
class Details:
    task_id: int
    # None when the histogram blob was missing or undecodable
    poll_times_histogram: DurationHistogram | None = None


class DetailsRef:
    """Single-entry slot for the currently focused task's details.

    ``focus(task_id)`` records which task the slot is for. While a task is
    focused, writes for any other task are refused, so a late response from
    a previously watched task cannot populate the new one.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._details: Details | None = None
        self._focused: int | None = None

    @property
    def focused_task_id(self) -> int | None:
        with self._lock:
            return self._focused

    def focus(self, task_id: int) -> None:
        with self._lock:
            self._focused = task_id
            if self._details is not None and self._details.task_id != task_id:
                self._details = None

    def get(self) -> Details | None:
        with self._lock:
            return self._details

    def set(self, details: Details) -> bool:
        """Install ``details``. Returns False if refused as stale."""
        with self._lock:
            if self._focused is not None and details.task_id != self._focused:
                return False
            self._details = details
            return True

    def clear(self) -> None:
        with self._lock:
            self._details = None
            self._focused = None


__all__ = ["Details", "DetailsRef"]

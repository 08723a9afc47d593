"""Task substate.

Tasks arrive once (``new_tasks``) and are then kept current by stats deltas.
Each task holds interned handles for its field names, location and target;
they are released when the task is replaced or dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING, Iterator, Mapping

from rich.text import Text

from vigil import wire
from vigil.state.fields import decode_fields, format_fields, format_location
from vigil.state.schema import Field, Visibility
from vigil.warnings import Linter, lint

if TYPE_CHECKING:
    from vigil.intern import InternedStr, Strings
    from vigil.state.schema import Metadata
    from vigil.styles import Styles

_logger = logging.getLogger(__name__)


class TaskState(Enum):
    RUNNING = "running"
    IDLE = "idle"
    COMPLETED = "completed"

    def icon(self, utf8: bool = True) -> str:
        if utf8:
            return {"running": "▶", "idle": "⏸", "completed": "⏹"}[self.value]
        return {"running": ">", "idle": ":", "completed": "x"}[self.value]


@dataclass
class Task:
    id: int
    meta_id: int
    target: "InternedStr"
    location: "InternedStr"
    fields: list[Field] = field(default_factory=list)
    kind: str = "task"
    stats: wire.TaskStats = field(default_factory=wire.TaskStats)
    last_updated_at: datetime | None = None
    warnings: list[str] = field(default_factory=list)
    # None while stale (changed while its list was hidden)
    formatted_fields: list[Text] | None = None

    @property
    def name(self) -> str | None:
        for f in self.fields:
            if f.name == Field.NAME:
                return str(f.value)
        return None

    def state(self) -> TaskState:
        if self.stats.dropped_at is not None:
            return TaskState.COMPLETED
        if self.is_running():
            return TaskState.RUNNING
        return TaskState.IDLE

    def is_running(self) -> bool:
        poll = self.stats.poll_stats
        if poll.last_poll_started is None:
            return False
        return poll.last_poll_ended is None or poll.last_poll_started > poll.last_poll_ended

    def is_completed(self) -> bool:
        return self.stats.dropped_at is not None

    def total(self, now: datetime) -> timedelta:
        if self.stats.created_at is None:
            return timedelta(0)
        end = self.stats.dropped_at or now
        return max(end - self.stats.created_at, timedelta(0))

    def busy(self, now: datetime) -> timedelta:
        busy = self.stats.poll_stats.busy_time
        started = self.stats.poll_stats.last_poll_started
        if self.is_running() and started is not None and self.stats.dropped_at is None:
            busy += max(now - started, timedelta(0))
        return busy

    def idle(self, now: datetime) -> timedelta:
        return max(self.total(now) - self.busy(now), timedelta(0))

    def polls(self) -> int:
        return self.stats.poll_stats.polls

    def wakes(self) -> int:
        return self.stats.wakes

    def self_wakes(self) -> int:
        return self.stats.self_wakes

    def self_wake_percent(self) -> int:
        if self.stats.wakes == 0:
            return 0
        return self.stats.self_wakes * 100 // self.stats.wakes

    def handles(self) -> list["InternedStr"]:
        """Every interned handle this task holds a reference on."""
        return [self.target, self.location, *(f.name for f in self.fields)]


class TasksState:
    def __init__(self) -> None:
        self._tasks: dict[int, Task] = {}
        self.linters: list[Linter] = []
        self.dropped_events = 0

    def update_tasks(
        self,
        styles: "Styles",
        strings: "Strings",
        metas: Mapping[int, "Metadata"],
        update: wire.TaskUpdate,
        visibility: Visibility,
        now: datetime | None,
    ) -> None:
        touched: list[Task] = []

        for pb in update.new_tasks:
            meta = metas.get(pb.metadata_id)
            if meta is None:
                _logger.debug("no metadata for task %d (meta_id=%d), skipping", pb.id, pb.metadata_id)
                continue

            previous = self._tasks.pop(pb.id, None)
            if previous is not None:
                strings.release_all(previous.handles())

            task = Task(
                id=pb.id,
                meta_id=meta.id,
                target=strings.acquire(meta.target),
                location=strings.string(format_location(pb.location)),
                fields=decode_fields(pb.fields, meta, strings),
                kind=pb.kind,
                stats=previous.stats if previous is not None else wire.TaskStats(),
                last_updated_at=now,
            )
            self._tasks[task.id] = task
            touched.append(task)

        for task_id, stats in update.stats_update.items():
            task = self._tasks.get(task_id)
            if task is None:
                continue
            task.stats = stats
            task.last_updated_at = now
            task.warnings = lint(task, self.linters)
            touched.append(task)

        for task in touched:
            if visibility is Visibility.SHOW:
                task.formatted_fields = format_fields(task.fields, styles)
            else:
                task.formatted_fields = None

        self.dropped_events += update.dropped_events

    def retain_active(self, strings: "Strings", now: datetime, retain_for: timedelta) -> int:
        """Drop tasks last updated before ``now - retain_for``.

        Returns:
            Number of tasks dropped.
        """
        cutoff = now - retain_for
        stale = [
            task_id
            for task_id, task in self._tasks.items()
            if task.last_updated_at is not None and task.last_updated_at < cutoff
        ]
        for task_id in stale:
            strings.release_all(self._tasks.pop(task_id).handles())
        return len(stale)

    def formatted_fields(self, task: Task, styles: "Styles") -> list[Text]:
        """Field rows for ``task``, rebuilt if they went stale while hidden."""
        if task.formatted_fields is None:
            task.formatted_fields = format_fields(task.fields, styles)
        return task.formatted_fields

    def task(self, task_id: int) -> Task | None:
        return self._tasks.get(task_id)

    def tasks(self) -> Iterator[Task]:
        return iter(self._tasks.values())

    def warnings(self) -> list[Task]:
        return [task for task in self._tasks.values() if task.warnings]

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks


__all__ = ["TaskState", "Task", "TasksState"]

"""Tasks list - the console's home screen."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable, Iterable

from rich.text import Text

from vigil.formatting import format_duration
from vigil.state.tasks import Task, TaskState
from vigil.view.table import SortBy

if TYPE_CHECKING:
    from rich.console import RenderableType

    from vigil.state import State
    from vigil.styles import Styles


class TasksSortBy(SortBy):
    WARNS = "Warn"
    TID = "ID"
    STATE = "State"
    NAME = "Name"
    TOTAL = "Total"
    BUSY = "Busy"
    IDLE = "Idle"
    POLLS = "Polls"
    TARGET = "Target"
    LOCATION = "Location"


_STATE_ORDER = {TaskState.RUNNING: 0, TaskState.IDLE: 1, TaskState.COMPLETED: 2}


class TasksTable:
    HEADER = (
        "Warn",
        "ID",
        "State",
        "Name",
        "Total",
        "Busy",
        "Idle",
        "Polls",
        "Target",
        "Location",
        "Fields",
    )
    default_sort = TasksSortBy.TOTAL
    default_descending = True

    def items(self, state: "State") -> Iterable[Task]:
        return state.tasks_state.tasks()

    def item_id(self, item: Task) -> int:
        return item.id

    def sort_key(self, sort_by: SortBy, now: datetime) -> Callable[[Task], Any]:
        match sort_by:
            case TasksSortBy.WARNS:
                return lambda t: (len(t.warnings), t.id)
            case TasksSortBy.TID:
                return lambda t: t.id
            case TasksSortBy.STATE:
                return lambda t: (_STATE_ORDER[t.state()], t.id)
            case TasksSortBy.NAME:
                return lambda t: (t.name or "", t.id)
            case TasksSortBy.BUSY:
                return lambda t: (t.busy(now), t.id)
            case TasksSortBy.IDLE:
                return lambda t: (t.idle(now), t.id)
            case TasksSortBy.POLLS:
                return lambda t: (t.polls(), t.id)
            case TasksSortBy.TARGET:
                return lambda t: (str(t.target), t.id)
            case TasksSortBy.LOCATION:
                return lambda t: (str(t.location), t.id)
            case _:
                return lambda t: (t.total(now), t.id)

    def row(self, task: Task, state: "State", styles: "Styles", now: datetime) -> list["RenderableType"]:
        warnings = Text()
        if task.warnings:
            warnings = styles.warning_glyph()
            warnings.append(str(len(task.warnings)))

        fields = Text()
        for part in state.tasks_state.formatted_fields(task, styles):
            fields.append_text(part)

        return [
            warnings,
            str(task.id),
            task.state().icon(styles.utf8),
            task.name or "",
            styles.time_units(format_duration(task.total(now))),
            styles.time_units(format_duration(task.busy(now))),
            styles.time_units(format_duration(task.idle(now))),
            str(task.polls()),
            str(task.target),
            str(task.location),
            fields,
        ]

    def title(self, state: "State", styles: "Styles") -> Text:
        tasks = state.tasks_state
        running = sum(1 for t in tasks.tasks() if t.state() is TaskState.RUNNING)
        idle = sum(1 for t in tasks.tasks() if t.state() is TaskState.IDLE)
        title = Text("Tasks", style=styles.modifier(bold=True))
        title.append(f" ({len(tasks)}) ")
        title.append(f"{TaskState.RUNNING.icon(styles.utf8)} Running ({running}) ")
        title.append(f"{TaskState.IDLE.icon(styles.utf8)} Idle ({idle})")
        if tasks.dropped_events:
            title.append(f" Dropped events ({tasks.dropped_events})", style=styles.fg("red"))
        flagged = tasks.warnings()
        if flagged:
            title.append("  ")
            title.append_text(styles.warning_glyph())
            title.append(f"{len(flagged)} tasks with warnings")
        return title


__all__ = ["TasksSortBy", "TasksTable"]

"""Task detail screen.

Holds the selected task's id (not the task itself) and looks it up on every
render, so an evicted task degrades to a notice instead of a stale view.
Poll-time statistics come from the shared detail slot.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from vigil.formatting import format_duration, format_nanos

if TYPE_CHECKING:
    from rich.console import RenderableType

    from vigil.input import KeyEvent
    from vigil.state import State
    from vigil.state.details import DetailsRef
    from vigil.state.tasks import Task
    from vigil.styles import Styles


class TaskView:
    def __init__(self, task_id: int, details: "DetailsRef") -> None:
        self.task_id = task_id
        self.details = details

    def update_input(self, event: "KeyEvent") -> None:
        # Nothing on this screen is interactive yet; Esc is handled by View.
        return None

    def render(self, styles: "Styles", state: "State", now: datetime) -> "RenderableType":
        task = state.tasks_state.task(self.task_id)
        if task is None:
            return Text(
                f"Task {self.task_id} no longer exists (press Esc to return)",
                style=styles.fg("bright_black"),
            )

        parts: list[RenderableType] = [
            Text.assemble(
                ("Task ", styles.modifier(bold=True)),
                (str(task.id), styles.modifier(bold=True)),
                "  ",
                ("Esc", styles.fg("cyan")),
                " = return to task list",
            ),
            self._render_summary(task, styles, now),
        ]

        if task.warnings:
            warnings = Text()
            for warning in task.warnings:
                warnings.append_text(styles.warning_glyph())
                warnings.append(warning + "\n")
            parts.append(Panel(warnings, title="Warnings", border_style=styles.fg("yellow")))

        parts.append(self._render_poll_times(styles))

        fields = Text()
        for row in state.tasks_state.formatted_fields(task, styles):
            fields.append_text(row)
            fields.append("\n")
        parts.append(Panel(fields, title="Fields"))
        return Group(*parts)

    def _render_summary(self, task: "Task", styles: "Styles", now: datetime) -> Table:
        grid = Table.grid(padding=(0, 2), expand=True)
        grid.add_column()
        grid.add_column()

        overview = Text()
        overview.append("ID: ", style=styles.modifier(bold=True))
        overview.append(f"{task.id}\n")
        if task.name:
            overview.append("Name: ", style=styles.modifier(bold=True))
            overview.append(f"{task.name}\n")
        overview.append("Target: ", style=styles.modifier(bold=True))
        overview.append(f"{task.target}\n")
        overview.append("Location: ", style=styles.modifier(bold=True))
        overview.append(f"{task.location}\n")
        overview.append("State: ", style=styles.modifier(bold=True))
        overview.append(f"{task.state().icon(styles.utf8)} {task.state().value}\n")
        overview.append("Total Time: ", style=styles.modifier(bold=True))
        overview.append_text(styles.time_units(format_duration(task.total(now))))
        overview.append("\nBusy: ", style=styles.modifier(bold=True))
        overview.append_text(styles.time_units(format_duration(task.busy(now))))
        overview.append("\nIdle: ", style=styles.modifier(bold=True))
        overview.append_text(styles.time_units(format_duration(task.idle(now))))
        overview.append(f"\nPolls: {task.polls()}")

        wakers = Text()
        wakers.append(f"Current wakers: {task.stats.waker_clones - task.stats.waker_drops} ")
        wakers.append(f"(clones: {task.stats.waker_clones}, drops: {task.stats.waker_drops})\n")
        wakers.append(f"Woken: {task.wakes()} times")
        if task.stats.last_wake is not None:
            since = max(now - task.stats.last_wake, timedelta(0))
            wakers.append(", last woken: ")
            wakers.append_text(styles.time_units(format_duration(since)))
            wakers.append(" ago")
        wakers.append(f"\nSelf Wakes: {task.self_wakes()} times ({task.self_wake_percent()}%)")

        grid.add_row(Panel(overview, title="Task"), Panel(wakers, title="Waker"))
        return grid

    def _render_poll_times(self, styles: "Styles") -> Panel:
        details = self.details.get()
        histogram = None
        if details is not None and details.task_id == self.task_id:
            histogram = details.poll_times_histogram

        if histogram is None:
            body = Text("waiting for poll times...", style=styles.fg("bright_black"))
        else:
            body = Text()
            body.append(f"Polls recorded: {histogram.total_count}\n")
            body.append("Min: ")
            body.append_text(styles.time_units(format_nanos(histogram.min())))
            body.append("\nMax: ")
            body.append_text(styles.time_units(format_nanos(histogram.max())))
        return Panel(body, title="Poll Times")


__all__ = ["TaskView"]

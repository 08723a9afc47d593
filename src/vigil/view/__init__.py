"""Vigil view - which screen is showing and what input does to it.

The view is a small state machine over three screens. Input either moves
between screens or is forwarded to the current screen's own handler. Moving
into and out of the task detail screen is reported to the caller, which owns
the per-task detail subscription:

    kind = view.update_input(event, state)
    match kind:
        case SelectTask(task_id):
            backend.watch_task_details(task_id)
        case ExitTaskView():
            backend.stop_watching_task_details()
            state.unset_task_details()
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from vigil.styles import Styles
from vigil.view.resources import ResourcesTable
from vigil.view.table import TableListState
from vigil.view.task import TaskView
from vigil.view.tasks import TasksTable

if TYPE_CHECKING:
    from rich.console import RenderableType

    from vigil.input import KeyEvent
    from vigil.state import State


# =============================================================================
# Screens
# =============================================================================


@dataclass(frozen=True)
class TasksList:
    """The table list of all tasks."""


@dataclass(frozen=True)
class ResourcesList:
    """The table list of all resources."""


@dataclass(frozen=True)
class TaskInstance:
    """Inspecting a single task instance."""

    view: TaskView


ViewState = TasksList | ResourcesList | TaskInstance


# =============================================================================
# Input outcomes
# =============================================================================


@dataclass(frozen=True)
class SelectTask:
    """A task was selected; open its detail subscription."""

    task_id: int


@dataclass(frozen=True)
class ExitTaskView:
    """The task detail screen was left; close the subscription."""


@dataclass(frozen=True)
class Other:
    """No change the caller needs to act on."""


UpdateKind = SelectTask | ExitTaskView | Other


class View:
    """Screen state machine and render dispatch.

    The tasks list state lives outside the current screen because it is the
    home screen: returning to it (for example by leaving a task's details)
    restores the sorting and selection the user left it with.
    """

    def __init__(self, styles: Styles | None = None) -> None:
        self.styles = styles or Styles()
        self.tasks_list: TableListState = TableListState(TasksTable())
        self.resources_list: TableListState = TableListState(ResourcesTable())
        self._state: ViewState = TasksList()

    def current_view(self) -> ViewState:
        return self._state

    def update_input(self, event: "KeyEvent", state: "State") -> UpdateKind:
        match self._state:
            case TasksList():
                if event.key == "enter":
                    task_id = self.tasks_list.selected_item()
                    if task_id is None or state.tasks_state.task(task_id) is None:
                        return Other()
                    details = state.task_details_ref()
                    details.focus(task_id)
                    self._state = TaskInstance(TaskView(task_id, details))
                    return SelectTask(task_id)
                if event.key == "r":
                    self._state = ResourcesList()
                    return Other()
                self.tasks_list.update_input(event)
            case ResourcesList():
                if event.key == "t":
                    self._state = TasksList()
                    return Other()
                self.resources_list.update_input(event)
            case TaskInstance(view=task_view):
                if event.key == "escape":
                    self._state = TasksList()
                    return ExitTaskView()
                task_view.update_input(event)
        return Other()

    def render(self, state: "State") -> "RenderableType":
        """Render the current screen, then run the state's retention pass."""
        match self._state:
            case TasksList():
                renderable = self.tasks_list.render(self.styles, state)
            case ResourcesList():
                renderable = self.resources_list.render(self.styles, state)
            case TaskInstance(view=task_view):
                now = state.last_updated_at() or datetime.now(timezone.utc)
                renderable = task_view.render(self.styles, state, now)

        state.retain_active()
        return renderable


__all__ = [
    "TasksList",
    "ResourcesList",
    "TaskInstance",
    "ViewState",
    "SelectTask",
    "ExitTaskView",
    "Other",
    "UpdateKind",
    "View",
]

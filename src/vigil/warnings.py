"""Task lints.

A lint inspects one task after each stats update and decides whether it
deserves a warning. Warnings show in the tasks list's Warn column and on the
task detail screen.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from vigil.state.tasks import Task


class Linter(Protocol):
    """Protocol for task lints."""

    def check(self, task: "Task") -> bool:
        """Return True if ``task`` should carry this warning."""
        ...

    def format(self, task: "Task") -> str:
        """Warning text for a task that ``check`` flagged."""
        ...


@dataclass(frozen=True)
class SelfWakePercent:
    """Warns when a task wakes itself for more than ``min_percent`` of its wakeups."""

    min_percent: int = 50

    def check(self, task: "Task") -> bool:
        return task.self_wake_percent() > self.min_percent

    def format(self, task: "Task") -> str:
        return (
            f"This task has woken itself for more than {self.min_percent}% "
            f"of its total wakeups ({task.self_wake_percent()}%)"
        )


def lint(task: "Task", linters: "list[Linter]") -> list[str]:
    return [linter.format(task) for linter in linters if linter.check(task)]


__all__ = ["Linter", "SelfWakePercent", "lint"]

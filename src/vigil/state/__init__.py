"""Vigil state - the in-memory mirror of a remote process's tasks and resources.

Usage:
    from vigil.state import State

    state = State().with_retain_for(timedelta(seconds=6))
    state.apply_update(update, view.current_view())
"""

from vigil.state.schema import (
    Field,
    FieldValue,
    Metadata,
    Temporality,
    ValueKind,
    Visibility,
)
from vigil.state.details import Details, DetailsRef
from vigil.state.histogram import DurationHistogram, HistogramDecodeError, decode_histogram
from vigil.state.tasks import Task, TaskState, TasksState
from vigil.state.resources import Resource, ResourcesState
from vigil.state.engine import State

__all__ = [
    # Schema
    "Field",
    "FieldValue",
    "Metadata",
    "Temporality",
    "ValueKind",
    "Visibility",
    # Details
    "Details",
    "DetailsRef",
    "DurationHistogram",
    "HistogramDecodeError",
    "decode_histogram",
    # Substates
    "Task",
    "TaskState",
    "TasksState",
    "Resource",
    "ResourcesState",
    # Engine
    "State",
]

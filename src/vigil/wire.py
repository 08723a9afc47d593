"""Wire Contracts - Messages streamed by an instrumented process.

These are CONTRACTS only - producing them (connecting, decoding the
transport framing, reconnecting) is the transport's job. The state engine
consumes them as-is.

Message flow:
- ``Update``: one batch per tick carrying the producer clock, newly
  registered metadata, task deltas and resource deltas
- ``TaskDetails``: per-task extended statistics, only streamed while a
  detail subscription for that task is open
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta


# =============================================================================
# Metadata
# =============================================================================


@dataclass(frozen=True)
class Location:
    """Source location of a span or callsite."""

    file: str | None = None
    module_path: str | None = None
    line: int | None = None
    column: int | None = None

    def __str__(self) -> str:
        if self.file is None:
            return self.module_path or "<unknown location>"
        text = self.file
        if self.line is not None:
            text += f":{self.line}"
            if self.column is not None:
                text += f":{self.column}"
        return text


@dataclass
class Metadata:
    """Static callsite description, registered once and referenced by id."""

    target: str
    field_names: list[str] = field(default_factory=list)
    name: str = ""
    location: Location | None = None


@dataclass
class RegisterMetadata:
    """One ``id -> Metadata`` registration. Either half may be missing."""

    id: int | None = None
    metadata: Metadata | None = None


@dataclass
class NewMetadata:
    metadata: list[RegisterMetadata] = field(default_factory=list)


# =============================================================================
# Fields
# =============================================================================


@dataclass
class Field:
    """A recorded span field.

    The name is sent either inline (``str_name``) or as an index into the
    ``field_names`` of the metadata identified by ``metadata_id``. Exactly
    one of the ``*_val`` attributes carries the value.
    """

    str_name: str | None = None
    name_idx: int | None = None
    metadata_id: int | None = None

    bool_val: bool | None = None
    str_val: str | None = None
    u64_val: int | None = None
    i64_val: int | None = None
    debug_val: str | None = None

    def value(self) -> tuple[str, bool | int | str] | None:
        """Return ``(kind, raw)`` for the populated value, or None."""
        for kind in ("bool", "str", "u64", "i64", "debug"):
            raw = getattr(self, f"{kind}_val")
            if raw is not None:
                return kind, raw
        return None


# =============================================================================
# Tasks
# =============================================================================


@dataclass
class Task:
    """A newly spawned task."""

    id: int
    metadata_id: int
    fields: list[Field] = field(default_factory=list)
    location: Location | None = None
    kind: str = "task"
    parents: tuple[int, ...] = ()


@dataclass
class PollStats:
    polls: int = 0
    first_poll: datetime | None = None
    last_poll_started: datetime | None = None
    last_poll_ended: datetime | None = None
    busy_time: timedelta = timedelta(0)


@dataclass
class TaskStats:
    """Cumulative task statistics, resent whenever they change."""

    created_at: datetime | None = None
    dropped_at: datetime | None = None
    wakes: int = 0
    waker_clones: int = 0
    waker_drops: int = 0
    last_wake: datetime | None = None
    self_wakes: int = 0
    poll_stats: PollStats = field(default_factory=PollStats)


@dataclass
class TaskUpdate:
    new_tasks: list[Task] = field(default_factory=list)
    stats_update: dict[int, TaskStats] = field(default_factory=dict)
    # Events the producer could not buffer and discarded
    dropped_events: int = 0


@dataclass
class TaskDetails:
    """Extended statistics for one task.

    ``poll_times_histogram`` is a serialized histogram of poll durations in
    nanoseconds.
    """

    task_id: int | None = None
    now: datetime | None = None
    poll_times_histogram: bytes | None = None


# =============================================================================
# Resources
# =============================================================================


@dataclass
class Attribute:
    """A resource attribute: a field plus an optional unit suffix."""

    field: Field
    unit: str | None = None


@dataclass
class Resource:
    id: int
    metadata_id: int
    kind: str = "Other"
    concrete_type: str = ""
    location: Location | None = None
    is_internal: bool = False
    parent_resource_id: int | None = None


@dataclass
class ResourceStats:
    created_at: datetime | None = None
    dropped_at: datetime | None = None
    attributes: list[Attribute] = field(default_factory=list)


@dataclass
class ResourceUpdate:
    new_resources: list[Resource] = field(default_factory=list)
    stats_update: dict[int, ResourceStats] = field(default_factory=dict)
    dropped_events: int = 0


# =============================================================================
# Update batch
# =============================================================================


@dataclass
class Update:
    """One streamed batch. Every part is optional."""

    now: datetime | None = None
    new_metadata: NewMetadata | None = None
    task_update: TaskUpdate | None = None
    resource_update: ResourceUpdate | None = None


__all__ = [
    "Location",
    "Metadata",
    "RegisterMetadata",
    "NewMetadata",
    "Field",
    "Task",
    "PollStats",
    "TaskStats",
    "TaskUpdate",
    "TaskDetails",
    "Attribute",
    "Resource",
    "ResourceStats",
    "ResourceUpdate",
    "Update",
]

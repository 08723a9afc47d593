"""Builders for wire messages used across the test suite.

Usage:
    from tests.helpers import register, spawn, update

    state.apply_update(update(t0, metas=[register(1)], tasks=[spawn(7, 1)]), TasksList())
"""

from __future__ import annotations

import struct
import zlib
from datetime import datetime

from vigil import wire
from vigil.state.histogram import V2_COMPRESSED_COOKIE, V2_COOKIE

DEFAULT_FIELD_NAMES = ("task.name", "x", "spawn.location")


def register(
    meta_id: int,
    target: str = "app::worker",
    field_names: tuple[str, ...] = DEFAULT_FIELD_NAMES,
    name: str = "runtime.spawn",
) -> wire.RegisterMetadata:
    return wire.RegisterMetadata(
        id=meta_id,
        metadata=wire.Metadata(target=target, field_names=list(field_names), name=name),
    )


def named(name: str, meta_id: int | None = None, **value) -> wire.Field:
    """Field carrying its name inline."""
    return wire.Field(str_name=name, metadata_id=meta_id, **value)


def indexed(idx: int, meta_id: int | None, **value) -> wire.Field:
    """Field naming itself by index into its metadata's field names."""
    return wire.Field(name_idx=idx, metadata_id=meta_id, **value)


def spawn(
    task_id: int,
    meta_id: int,
    fields: list[wire.Field] | None = None,
    location: wire.Location | None = None,
) -> wire.Task:
    return wire.Task(
        id=task_id,
        metadata_id=meta_id,
        fields=fields or [],
        location=location or wire.Location(file="src/main.rs", line=10, column=5),
    )


def resource(
    resource_id: int,
    meta_id: int,
    kind: str = "Timer",
    concrete_type: str = "Sleep",
    **kwargs,
) -> wire.Resource:
    return wire.Resource(
        id=resource_id,
        metadata_id=meta_id,
        kind=kind,
        concrete_type=concrete_type,
        location=wire.Location(file="src/timer.rs", line=3, column=1),
        **kwargs,
    )


def update(
    now: datetime | None,
    metas: list[wire.RegisterMetadata] | None = None,
    tasks: list[wire.Task] | None = None,
    task_stats: dict[int, wire.TaskStats] | None = None,
    resources: list[wire.Resource] | None = None,
    resource_stats: dict[int, wire.ResourceStats] | None = None,
    dropped_events: int = 0,
) -> wire.Update:
    """Assemble an update batch; parts left as None are omitted."""
    task_update = None
    if tasks is not None or task_stats is not None or dropped_events:
        task_update = wire.TaskUpdate(
            new_tasks=tasks or [],
            stats_update=task_stats or {},
            dropped_events=dropped_events,
        )
    resource_update = None
    if resources is not None or resource_stats is not None:
        resource_update = wire.ResourceUpdate(
            new_resources=resources or [],
            stats_update=resource_stats or {},
        )
    return wire.Update(
        now=now,
        new_metadata=wire.NewMetadata(metadata=metas) if metas is not None else None,
        task_update=task_update,
        resource_update=resource_update,
    )


# =============================================================================
# Histogram blobs
# =============================================================================

ONE_HOUR_NS = 3_600_000_000_000


def zigzag_varint(n: int) -> bytes:
    z = (n << 1) ^ (n >> 63)
    out = bytearray()
    while z >= 0x80:
        out.append((z & 0x7F) | 0x80)
        z >>= 7
    out.append(z)
    return bytes(out)


def encode_v2(
    counts: list[int],
    lowest: int = 1,
    highest: int = ONE_HOUR_NS,
    significant_digits: int = 3,
    normalizing_offset: int = 0,
    payload_len: int | None = None,
) -> bytes:
    """Serialize ``counts`` in the V2 layout; negative entries are zero runs."""
    payload = b"".join(zigzag_varint(c) for c in counts)
    header = struct.pack(
        ">IIIIQQd",
        V2_COOKIE,
        len(payload) if payload_len is None else payload_len,
        normalizing_offset,
        significant_digits,
        lowest,
        highest,
        1.0,
    )
    return header + payload


def compress(blob: bytes) -> bytes:
    deflated = zlib.compress(blob)
    return struct.pack(">II", V2_COMPRESSED_COOKIE, len(deflated)) + deflated

"""Resource substate.

Resources (timers, semaphores, channels...) mirror tasks: registered once,
kept current by stats deltas whose attributes are decoded against the
resource's metadata.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Iterator, Mapping

from rich.text import Text

from vigil import wire
from vigil.state.fields import decode_field, format_location, sort_fields
from vigil.state.schema import Field, Visibility
from vigil.styles import Styles

if TYPE_CHECKING:
    from vigil.intern import InternedStr, Strings
    from vigil.state.schema import Metadata

_logger = logging.getLogger(__name__)


@dataclass
class Resource:
    id: int
    meta_id: int
    kind: str
    target: "InternedStr"
    concrete_type: "InternedStr"
    location: "InternedStr"
    is_internal: bool = False
    parent_id: int | None = None
    created_at: datetime | None = None
    dropped_at: datetime | None = None
    attributes: list[Field] = field(default_factory=list)
    units: dict[str, str] = field(default_factory=dict)
    last_updated_at: datetime | None = None
    formatted_attributes: list[Text] | None = None

    def total(self, now: datetime) -> timedelta:
        if self.created_at is None:
            return timedelta(0)
        end = self.dropped_at or now
        return max(end - self.created_at, timedelta(0))

    def is_dropped(self) -> bool:
        return self.dropped_at is not None

    def handles(self) -> list["InternedStr"]:
        return [self.target, self.concrete_type, self.location, *(a.name for a in self.attributes)]


def format_attributes(attributes: list[Field], units: Mapping[str, str], styles: Styles) -> list[Text]:
    """Render attributes as ``name=value<unit> `` rows in field order."""
    key_style = styles.fg("bright_blue") + styles.modifier(bold=True)
    delim_style = styles.fg("bright_blue") + styles.modifier(dim=True)
    val_style = styles.fg("yellow")
    unit_style = styles.fg("bright_black")

    rows = []
    for attr in sort_fields(attributes):
        row = Text()
        row.append(str(attr.name), style=key_style)
        row.append("=", style=delim_style)
        row.append(str(attr.value), style=val_style)
        unit = units.get(str(attr.name))
        if unit:
            row.append(unit, style=unit_style)
        row.append(" ")
        rows.append(row)
    return rows


class ResourcesState:
    def __init__(self) -> None:
        self._resources: dict[int, Resource] = {}
        self.dropped_events = 0

    def update_resources(
        self,
        styles: Styles,
        strings: "Strings",
        metas: Mapping[int, "Metadata"],
        update: wire.ResourceUpdate,
        visibility: Visibility,
        now: datetime | None,
    ) -> None:
        touched: list[Resource] = []

        for pb in update.new_resources:
            meta = metas.get(pb.metadata_id)
            if meta is None:
                _logger.debug(
                    "no metadata for resource %d (meta_id=%d), skipping", pb.id, pb.metadata_id
                )
                continue

            previous = self._resources.pop(pb.id, None)
            if previous is not None:
                strings.release_all(previous.handles())

            resource = Resource(
                id=pb.id,
                meta_id=meta.id,
                kind=pb.kind,
                target=strings.acquire(meta.target),
                concrete_type=strings.string(pb.concrete_type),
                location=strings.string(format_location(pb.location)),
                is_internal=pb.is_internal,
                parent_id=pb.parent_resource_id,
                last_updated_at=now,
            )
            self._resources[resource.id] = resource
            touched.append(resource)

        for resource_id, stats in update.stats_update.items():
            resource = self._resources.get(resource_id)
            if resource is None:
                continue
            meta = metas.get(resource.meta_id)
            if meta is None:
                continue
            strings.release_all(a.name for a in resource.attributes)
            attributes = []
            units = {}
            for attr in stats.attributes:
                decoded = decode_field(attr.field, meta, strings)
                if decoded is None:
                    continue
                attributes.append(decoded)
                if attr.unit:
                    units[str(decoded.name)] = attr.unit
            resource.attributes = attributes
            resource.units = units
            resource.created_at = stats.created_at
            resource.dropped_at = stats.dropped_at
            resource.last_updated_at = now
            touched.append(resource)

        for resource in touched:
            if visibility is Visibility.SHOW:
                resource.formatted_attributes = format_attributes(
                    resource.attributes, resource.units, styles
                )
            else:
                resource.formatted_attributes = None

        self.dropped_events += update.dropped_events

    def retain_active(self, strings: "Strings", now: datetime, retain_for: timedelta) -> int:
        cutoff = now - retain_for
        stale = [
            resource_id
            for resource_id, resource in self._resources.items()
            if resource.last_updated_at is not None and resource.last_updated_at < cutoff
        ]
        for resource_id in stale:
            strings.release_all(self._resources.pop(resource_id).handles())
        return len(stale)

    def formatted_attributes(self, resource: Resource, styles: Styles) -> list[Text]:
        if resource.formatted_attributes is None:
            resource.formatted_attributes = format_attributes(
                resource.attributes, resource.units, styles
            )
        return resource.formatted_attributes

    def resource(self, resource_id: int) -> Resource | None:
        return self._resources.get(resource_id)

    def resources(self) -> Iterator[Resource]:
        return iter(self._resources.values())

    def __len__(self) -> int:
        return len(self._resources)

    def __contains__(self, resource_id: object) -> bool:
        return resource_id in self._resources


__all__ = ["Resource", "ResourcesState", "format_attributes"]

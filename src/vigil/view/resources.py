"""Resources list."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable, Iterable

from rich.text import Text

from vigil.formatting import format_duration
from vigil.state.resources import Resource
from vigil.view.table import SortBy

if TYPE_CHECKING:
    from rich.console import RenderableType

    from vigil.state import State
    from vigil.styles import Styles


class ResourcesSortBy(SortBy):
    RID = "ID"
    PARENT = "Parent"
    KIND = "Kind"
    TOTAL = "Total"
    TARGET = "Target"
    CONCRETE_TYPE = "Type"
    LOCATION = "Location"


class ResourcesTable:
    HEADER = (
        "ID",
        "Parent",
        "Kind",
        "Total",
        "Target",
        "Type",
        "Vis",
        "Location",
        "Attributes",
    )
    default_sort = ResourcesSortBy.RID
    default_descending = False

    def items(self, state: "State") -> Iterable[Resource]:
        return state.resources_state.resources()

    def item_id(self, item: Resource) -> int:
        return item.id

    def sort_key(self, sort_by: SortBy, now: datetime) -> Callable[[Resource], Any]:
        match sort_by:
            case ResourcesSortBy.PARENT:
                return lambda r: (r.parent_id is not None, r.parent_id or 0, r.id)
            case ResourcesSortBy.KIND:
                return lambda r: (r.kind, r.id)
            case ResourcesSortBy.TOTAL:
                return lambda r: (r.total(now), r.id)
            case ResourcesSortBy.TARGET:
                return lambda r: (str(r.target), r.id)
            case ResourcesSortBy.CONCRETE_TYPE:
                return lambda r: (str(r.concrete_type), r.id)
            case ResourcesSortBy.LOCATION:
                return lambda r: (str(r.location), r.id)
            case _:
                return lambda r: r.id

    def row(
        self, resource: Resource, state: "State", styles: "Styles", now: datetime
    ) -> list["RenderableType"]:
        attributes = Text()
        for part in state.resources_state.formatted_attributes(resource, styles):
            attributes.append_text(part)

        visibility = styles.if_utf8("🔒", "INT") if resource.is_internal else styles.if_utf8("✅", "PUB")
        return [
            str(resource.id),
            "" if resource.parent_id is None else str(resource.parent_id),
            resource.kind,
            styles.time_units(format_duration(resource.total(now))),
            str(resource.target),
            str(resource.concrete_type),
            visibility,
            str(resource.location),
            attributes,
        ]

    def title(self, state: "State", styles: "Styles") -> Text:
        resources = state.resources_state
        title = Text("Resources", style=styles.modifier(bold=True))
        title.append(f" ({len(resources)})")
        if resources.dropped_events:
            title.append(f" Dropped events ({resources.dropped_events})", style=styles.fg("red"))
        return title


__all__ = ["ResourcesSortBy", "ResourcesTable"]

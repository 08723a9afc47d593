"""List presentation state shared by the tasks and resources lists.

A ``TableListState`` remembers how its list was sorted and which row was
selected, so leaving a list and coming back restores it as it was. Rows are
entity ids; entities are looked up in the state on every render, so an
evicted entity simply disappears from the list.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Generic, Iterable, Protocol, TypeVar

from rich.table import Table
from rich.text import Text

from vigil import input

if TYPE_CHECKING:
    from rich.console import RenderableType

    from vigil.state import State
    from vigil.styles import Styles

TABLE_HIGHLIGHT_SYMBOL = ">> "

Item = TypeVar("Item")


class SortBy(Enum):
    """Base for per-table sort columns.

    Subclasses declare one member per sortable column, valued with the
    column heading.
    """

    def next(self) -> SortBy:
        members = list(type(self))
        return members[(members.index(self) + 1) % len(members)]

    def prev(self) -> SortBy:
        members = list(type(self))
        return members[(members.index(self) - 1) % len(members)]


class TableSpec(Protocol[Item]):
    """What a list table contributes: its items, columns, sort keys and rows."""

    HEADER: tuple[str, ...]
    default_sort: SortBy
    default_descending: bool

    def items(self, state: "State") -> Iterable[Item]: ...

    def item_id(self, item: Item) -> int: ...

    def sort_key(self, sort_by: SortBy, now: datetime) -> Callable[[Item], Any]: ...

    def row(self, item: Item, state: "State", styles: "Styles", now: datetime) -> list["RenderableType"]: ...

    def title(self, state: "State", styles: "Styles") -> Text: ...


class TableListState(Generic[Item]):
    def __init__(self, table: TableSpec[Item]) -> None:
        self.table = table
        self.sort_by = table.default_sort
        self.descending = table.default_descending
        self.selected: int | None = None
        self.sorted_ids: list[int] = []

    def update_input(self, event: input.KeyEvent) -> None:
        if input.is_down(event):
            self.scroll_next()
        elif input.is_up(event):
            self.scroll_prev()
        elif event.key in ("right", "l"):
            self.sort_by = self.sort_by.next()
        elif event.key in ("left", "h"):
            self.sort_by = self.sort_by.prev()
        elif event.key == "i":
            self.descending = not self.descending

    def scroll_next(self) -> None:
        if not self.sorted_ids:
            return
        if self.selected is None:
            self.selected = 0
        else:
            self.selected = min(self.selected + 1, len(self.sorted_ids) - 1)

    def scroll_prev(self) -> None:
        if not self.sorted_ids:
            return
        if self.selected is None:
            self.selected = 0
        else:
            self.selected = max(self.selected - 1, 0)

    def selected_item(self) -> int | None:
        """Id of the selected row, or None when nothing is selected."""
        if self.selected is None or self.selected >= len(self.sorted_ids):
            return None
        return self.sorted_ids[self.selected]

    def _resort(self, state: "State", now: datetime) -> list[Item]:
        previous = self.selected_item()
        items = sorted(
            self.table.items(state),
            key=self.table.sort_key(self.sort_by, now),
            reverse=self.descending,
        )
        self.sorted_ids = [self.table.item_id(item) for item in items]

        if not self.sorted_ids:
            self.selected = None
        elif previous is not None and previous in self.sorted_ids:
            self.selected = self.sorted_ids.index(previous)
        elif self.selected is None:
            self.selected = 0
        else:
            self.selected = min(self.selected, len(self.sorted_ids) - 1)
        return items

    def render(self, styles: "Styles", state: "State") -> Table:
        now = state.last_updated_at() or datetime.now(timezone.utc)
        items = self._resort(state, now)

        table = Table(
            title=self.table.title(state, styles),
            title_justify="left",
            expand=True,
            box=None,
            header_style=styles.header_style(),
        )
        table.add_column("", width=len(TABLE_HIGHLIGHT_SYMBOL), no_wrap=True)
        for name in self.table.HEADER:
            heading = name
            if name == self.sort_by.value:
                arrow = styles.if_utf8("▼" if self.descending else "▲", "v" if self.descending else "^")
                heading = f"{name}{arrow}"
            table.add_column(heading, no_wrap=True)

        highlight = styles.modifier(reverse=True)
        for position, item in enumerate(items):
            is_selected = position == self.selected
            marker = TABLE_HIGHLIGHT_SYMBOL if is_selected else ""
            table.add_row(
                marker,
                *self.table.row(item, state, styles, now),
                style=highlight if is_selected else None,
            )
        return table


__all__ = ["TABLE_HIGHLIGHT_SYMBOL", "SortBy", "TableSpec", "TableListState"]

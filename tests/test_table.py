"""Tests for list sorting and selection."""

from datetime import timedelta

import pytest

from tests.helpers import named, register, spawn, update
from vigil.input import KeyEvent
from vigil.view import TasksList
from vigil.view.table import TableListState
from vigil.view.resources import ResourcesSortBy, ResourcesTable
from vigil.view.tasks import TasksSortBy, TasksTable


@pytest.fixture
def tasks_list():
    return TableListState(TasksTable())


def spawn_named(state, when, *names_by_id):
    state.apply_update(
        update(
            when,
            metas=[register(1)],
            tasks=[spawn(tid, 1, fields=[named("task.name", str_val=name)]) for tid, name in names_by_id],
        ),
        TasksList(),
    )


class TestSortBy:
    def test_next_wraps(self):
        assert TasksSortBy.LOCATION.next() is TasksSortBy.WARNS
        assert TasksSortBy.WARNS.prev() is TasksSortBy.LOCATION

    def test_members_name_columns(self):
        """Every sortable column is one of the table's headings."""
        assert {m.value for m in TasksSortBy} <= set(TasksTable.HEADER)
        assert {m.value for m in ResourcesSortBy} <= set(ResourcesTable.HEADER)


class TestTableListState:
    """Test input handling and resorting."""

    def test_defaults(self, tasks_list):
        assert tasks_list.sort_by is TasksSortBy.TOTAL
        assert tasks_list.descending
        assert tasks_list.selected_item() is None

    def test_sort_column_keys(self, tasks_list):
        tasks_list.update_input(KeyEvent("right"))
        assert tasks_list.sort_by is TasksSortBy.BUSY

        tasks_list.update_input(KeyEvent("h"))
        tasks_list.update_input(KeyEvent("left"))
        assert tasks_list.sort_by is TasksSortBy.NAME

    def test_invert(self, tasks_list):
        tasks_list.update_input(KeyEvent("i"))
        assert not tasks_list.descending

    def test_scroll_on_empty_list(self, tasks_list):
        tasks_list.update_input(KeyEvent("down"))
        assert tasks_list.selected is None

    def test_sort_by_name(self, state, tasks_list, t0):
        spawn_named(state, t0, (1, "b"), (2, "c"), (3, "a"))
        tasks_list.sort_by = TasksSortBy.NAME
        tasks_list.descending = False

        tasks_list.render(state.styles, state)

        assert tasks_list.sorted_ids == [3, 1, 2]

    def test_scroll_clamps_to_bounds(self, state, tasks_list, t0):
        spawn_named(state, t0, (1, "a"), (2, "b"))
        tasks_list.render(state.styles, state)

        for _ in range(5):
            tasks_list.update_input(KeyEvent("j"))
        assert tasks_list.selected == 1

        for _ in range(5):
            tasks_list.update_input(KeyEvent("up"))
        assert tasks_list.selected == 0

    def test_selection_follows_task_across_resort(self, state, tasks_list, t0):
        spawn_named(state, t0, (1, "a"), (2, "b"))
        tasks_list.sort_by = TasksSortBy.TID
        tasks_list.descending = False
        tasks_list.render(state.styles, state)
        tasks_list.update_input(KeyEvent("j"))
        assert tasks_list.selected_item() == 2

        tasks_list.update_input(KeyEvent("i"))
        tasks_list.render(state.styles, state)

        assert tasks_list.sorted_ids == [2, 1]
        assert tasks_list.selected_item() == 2

    def test_selection_clamped_when_selected_row_evicted(self, state, tasks_list, t0):
        spawn_named(state, t0, (3, "c"))
        spawn_named(state, t0 + timedelta(seconds=5), (1, "a"), (2, "b"))
        tasks_list.sort_by = TasksSortBy.TID
        tasks_list.descending = False
        tasks_list.render(state.styles, state)
        tasks_list.update_input(KeyEvent("j"))
        tasks_list.update_input(KeyEvent("j"))
        assert tasks_list.selected_item() == 3

        state.apply_update(update(t0 + timedelta(seconds=8)), TasksList())
        state.retain_active()
        tasks_list.render(state.styles, state)

        assert tasks_list.sorted_ids == [1, 2]
        assert tasks_list.selected_item() == 2

    def test_selected_row_marked(self, state, tasks_list, t0):
        spawn_named(state, t0, (1, "a"))

        table = tasks_list.render(state.styles, state)

        assert table.row_count == 1
        assert tasks_list.selected_item() == 1

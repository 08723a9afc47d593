"""Tests for the Vigil Textual app."""

from datetime import datetime, timezone

import pytest

from tests.helpers import named, register, spawn, update
from vigil import wire
from vigil.app import ConsoleApp
from vigil.backend import ConsoleBackend
from vigil.config import ConsoleConfig
from vigil.view import TaskInstance, TasksList

NOW = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def make_app() -> tuple[ConsoleApp, ConsoleBackend]:
    backend = ConsoleBackend()
    backend.start()
    return ConsoleApp(backend, ConsoleConfig(refresh_rate=20)), backend


def spawn_worker(backend: ConsoleBackend) -> None:
    backend.emit_update(
        update(NOW, metas=[register(1)], tasks=[spawn(7, 1, fields=[named("task.name", str_val="worker")])])
    )


@pytest.mark.asyncio
async def test_app_launches():
    """App should launch without errors."""
    app, _ = make_app()
    async with app.run_test():
        assert app.title == "Vigil"
        assert app.query_one("#console-header") is not None
        assert app.query_one("#console-body") is not None


@pytest.mark.asyncio
async def test_updates_drained_into_state():
    app, backend = make_app()
    async with app.run_test() as pilot:
        spawn_worker(backend)
        app._poll_and_refresh()
        await pilot.pause()

        assert 7 in app.state.tasks_state
        assert app.state.last_updated_at() == NOW


@pytest.mark.asyncio
async def test_enter_opens_detail_subscription():
    """Selecting a task watches its details; leaving stops watching."""
    app, backend = make_app()
    async with app.run_test() as pilot:
        spawn_worker(backend)
        app._poll_and_refresh()
        await pilot.pause()

        await pilot.press("enter")
        await pilot.pause()

        assert isinstance(app.view.current_view(), TaskInstance)
        assert backend.watched_task_id == 7

        backend.emit_task_details(wire.TaskDetails(task_id=7))
        app._poll_and_refresh()
        assert app.state.task_details_ref().get().task_id == 7

        await pilot.press("escape")
        await pilot.pause()

        assert app.view.current_view() == TasksList()
        assert backend.watched_task_id is None
        assert app.state.task_details_ref().get() is None


@pytest.mark.asyncio
async def test_space_toggles_pause():
    app, _ = make_app()
    async with app.run_test() as pilot:
        await pilot.press("space")
        await pilot.pause()
        assert app.state.is_paused()

        await pilot.press("space")
        await pilot.pause()
        assert not app.state.is_paused()


@pytest.mark.asyncio
async def test_unappliable_update_skipped():
    """A broken batch is logged and skipped; later batches still apply."""
    app, backend = make_app()
    async with app.run_test() as pilot:
        backend.emit_update(wire.Update(now=NOW, task_update=wire.TaskUpdate(stats_update=None)))
        spawn_worker(backend)
        app._poll_and_refresh()
        await pilot.pause()

        assert app.skipped_updates == 1
        assert 7 in app.state.tasks_state


@pytest.mark.asyncio
async def test_app_quit_binding():
    """Pressing q should trigger quit action."""
    app, _ = make_app()
    quit_called = False
    original_quit = app.action_quit

    async def mock_quit():
        nonlocal quit_called
        quit_called = True
        await original_quit()

    app.action_quit = mock_quit

    async with app.run_test() as pilot:
        await pilot.press("q")
        await pilot.pause()
        assert quit_called, "action_quit was not called when 'q' pressed"

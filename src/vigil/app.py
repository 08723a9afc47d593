"""Vigil Textual Application.

Live console for an async runtime's tasks and resources. The app owns the
single-threaded loop: on every tick it drains whatever the transport queued on
the backend, merges it into the state engine, and redraws the current screen.

Keys:
    q          Quit
    space      Pause / resume (retention stops while paused)
    j/k ↑/↓    Move the selection
    h/l ←/→    Change the sort column
    i          Invert the sort
    enter      Inspect the selected task
    escape     Back to the task list
    r / t      Resources list / tasks list
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.widgets import Footer, Static

from vigil import input
from vigil.config import ConsoleConfig
from vigil.input import KeyEvent
from vigil.view import ExitTaskView, SelectTask, View

if TYPE_CHECKING:
    from textual.timer import Timer

    from vigil.backend import ConsoleBackend
    from vigil.state import State

_logger = logging.getLogger(__name__)


class ConsoleApp(App[None]):
    """Console TUI driven by a ConsoleBackend."""

    TITLE = "Vigil"
    SUB_TITLE = "Async Runtime Console"

    DEFAULT_CSS = """
    #console-header {
        height: 1;
        background: $panel;
        padding: 0 1;
    }

    #console-main {
        height: 1fr;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit", show=True),
        Binding("space", "toggle_pause", "Pause", show=True),
    ]

    def __init__(
        self,
        backend: "ConsoleBackend",
        config: ConsoleConfig | None = None,
    ) -> None:
        """Initialize the console app.

        Args:
            backend: ConsoleBackend the transport feeds.
            config: Console configuration (defaults apply when omitted).
        """
        super().__init__()
        self._config = config or ConsoleConfig()
        self._backend = backend
        self.state: State = self._config.build_state()
        self.view = View(self._config.styles())
        self._refresh_interval = 1.0 / self._config.refresh_rate
        self._refresh_timer: "Timer | None" = None
        self._skipped_updates = 0

    def compose(self) -> ComposeResult:
        yield Static(id="console-header")
        with Container(id="console-main"):
            yield Static(id="console-body")
        yield Footer()

    def on_mount(self) -> None:
        """Start refresh timer when app mounts."""
        self._refresh_timer = self.set_interval(self._refresh_interval, self._poll_and_refresh)
        self._render_frame()

    @property
    def skipped_updates(self) -> int:
        return self._skipped_updates

    def _poll_and_refresh(self) -> None:
        """Apply everything the backend queued since the last tick, then redraw."""
        updates, details = self._backend.drain()

        for update in updates:
            try:
                self.state.apply_update(update, self.view.current_view())
            except Exception:
                self._skipped_updates += 1
                _logger.exception("Skipping update that could not be applied")

        for response in details:
            self.state.update_task_details(response)

        self._render_frame()

    def _render_frame(self) -> None:
        self.query_one("#console-header", Static).update(self._render_header())
        self.query_one("#console-body", Static).update(self.view.render(self.state))

    def _render_header(self) -> Text:
        styles = self.view.styles
        header = Text()
        if self._backend.connected:
            header.append("connected", style=styles.fg("green"))
        else:
            header.append("disconnected", style=styles.fg("red"))

        last_updated_at = self.state.last_updated_at()
        header.append("  last update: ")
        if last_updated_at is None:
            header.append("never", style=styles.modifier(dim=True))
        else:
            header.append(last_updated_at.strftime("%H:%M:%S"), style=styles.modifier(bold=True))

        if self.state.is_paused():
            header.append("  PAUSED", style=styles.fg("yellow") + styles.modifier(bold=True, reverse=True))
        return header

    def on_key(self, event: events.Key) -> None:
        key_event = KeyEvent.from_textual(event)
        # Handled by BINDINGS.
        if input.should_quit(key_event) or input.is_space(key_event):
            return

        match self.view.update_input(key_event, self.state):
            case SelectTask(task_id=task_id):
                self._backend.watch_task_details(task_id)
            case ExitTaskView():
                self._backend.stop_watching_task_details()
                self.state.unset_task_details()
        self._render_frame()

    def action_toggle_pause(self) -> None:
        if self.state.is_paused():
            self.state.resume()
        else:
            self.state.pause()
        self._render_frame()


__all__ = ["ConsoleApp"]

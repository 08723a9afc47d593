"""State Engine - Merges streamed updates into a queryable snapshot.

Owns the interning pool, the metadata table and the task/resource
substates. Updates are merged as they arrive; retention runs once per
rendered frame (see ``View.render``).

The retention clock is the producer's clock: ``last_updated_at`` is the
timestamp carried by the most recent update, not local wall time.

Usage:
    state = State().with_retain_for(timedelta(seconds=6))

    # Transport path
    state.apply_update(update, view.current_view())
    state.update_task_details(details)

    # Render path
    view.render(state)          # ends with state.retain_active()
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Iterable

from vigil import wire
from vigil.intern import Strings
from vigil.state.details import Details, DetailsRef
from vigil.state.fields import metadata_from_wire
from vigil.state.histogram import HistogramDecodeError, decode_histogram
from vigil.state.resources import ResourcesState
from vigil.state.schema import Metadata, Temporality, Visibility
from vigil.state.tasks import TasksState
from vigil.styles import Styles

if TYPE_CHECKING:
    from vigil.view import ViewState
    from vigil.warnings import Linter

_logger = logging.getLogger(__name__)


class State:
    def __init__(self, styles: Styles | None = None) -> None:
        self.styles = styles or Styles()
        self._metas: dict[int, Metadata] = {}
        self._last_updated_at: datetime | None = None
        self._temporality = Temporality.LIVE
        self._tasks_state = TasksState()
        self._resources_state = ResourcesState()
        self._current_task_details = DetailsRef()
        self._retain_for: timedelta | None = None
        self._strings = Strings()

    def with_retain_for(self, retain_for: timedelta | None) -> State:
        self._retain_for = retain_for
        return self

    def with_task_linters(self, linters: Iterable["Linter"]) -> State:
        self._tasks_state.linters.extend(linters)
        return self

    @property
    def retain_for(self) -> timedelta | None:
        return self._retain_for

    @property
    def strings(self) -> Strings:
        return self._strings

    @property
    def metas(self) -> dict[int, Metadata]:
        return self._metas

    def last_updated_at(self) -> datetime | None:
        return self._last_updated_at

    # =========================================================================
    # Ingestion
    # =========================================================================

    def apply_update(self, update: wire.Update, current_view: "ViewState") -> None:
        """Merge one update batch.

        Metadata is ingested before any deltas so fields in the same batch
        can reference it. Only the list on screen gets its display rows
        rebuilt; the other keeps correct data with stale rows.
        """
        # Local import: vigil.view imports this module.
        from vigil.view import ResourcesList, TasksList

        if update.now is not None:
            self._last_updated_at = update.now

        if update.new_metadata is not None:
            self.ingest_metadata(update.new_metadata)

        if update.task_update is not None:
            visibility = Visibility.SHOW if isinstance(current_view, TasksList) else Visibility.HIDE
            self._tasks_state.update_tasks(
                self.styles,
                self._strings,
                self._metas,
                update.task_update,
                visibility,
                self._last_updated_at,
            )

        if update.resource_update is not None:
            visibility = (
                Visibility.SHOW if isinstance(current_view, ResourcesList) else Visibility.HIDE
            )
            self._resources_state.update_resources(
                self.styles,
                self._strings,
                self._metas,
                update.resource_update,
                visibility,
                self._last_updated_at,
            )

    def ingest_metadata(self, new_metadata: wire.NewMetadata) -> None:
        """Register metadata. A repeated id overwrites the earlier entry."""
        for registration in new_metadata.metadata:
            if registration.id is None or registration.metadata is None:
                continue
            previous = self._metas.get(registration.id)
            self._metas[registration.id] = metadata_from_wire(
                registration.metadata, registration.id, self._strings
            )
            if previous is not None:
                self._strings.release_all((previous.target, *previous.field_names))

    def retain_active(self) -> None:
        """Evict entities idle longer than the retention window, then sweep strings.

        No-op while paused. Without a window or a producer timestamp, only
        the string sweep runs.
        """
        if self.is_paused():
            return

        now, retain_for = self._last_updated_at, self._retain_for
        if now is not None and retain_for is not None:
            tasks = self._tasks_state.retain_active(self._strings, now, retain_for)
            resources = self._resources_state.retain_active(self._strings, now, retain_for)
            if tasks or resources:
                _logger.debug("retention dropped %d tasks, %d resources", tasks, resources)

        # Dropped entities released their handles above; sweep what is left unreferenced.
        self._strings.retain_referenced()

    # =========================================================================
    # Task details
    # =========================================================================

    def task_details_ref(self) -> DetailsRef:
        return self._current_task_details

    def update_task_details(self, update: wire.TaskDetails) -> None:
        """Install details for the focused task.

        An undecodable histogram still installs the details, with no
        histogram. A response without a task id is ignored.
        """
        if update.task_id is None:
            return

        histogram = None
        if update.poll_times_histogram is not None:
            try:
                histogram = decode_histogram(update.poll_times_histogram)
            except HistogramDecodeError as e:
                _logger.warning("failed to decode poll times histogram for task %d: %s", update.task_id, e)

        details = Details(task_id=update.task_id, poll_times_histogram=histogram)
        if not self._current_task_details.set(details):
            _logger.debug(
                "ignoring details for task %d (focused on %s)",
                update.task_id,
                self._current_task_details.focused_task_id,
            )

    def unset_task_details(self) -> None:
        self._current_task_details.clear()

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def tasks_state(self) -> TasksState:
        return self._tasks_state

    @property
    def resources_state(self) -> ResourcesState:
        return self._resources_state

    # =========================================================================
    # Temporality
    # =========================================================================

    def pause(self) -> None:
        self._temporality = Temporality.PAUSED

    def resume(self) -> None:
        self._temporality = Temporality.LIVE

    def is_paused(self) -> bool:
        return self._temporality is Temporality.PAUSED


__all__ = ["State"]

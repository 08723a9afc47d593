"""Tests for the shared task-detail slot."""

import threading

from vigil.state.details import Details, DetailsRef


class TestDetailsRef:
    """Test focus-gated writes to the detail slot."""

    def test_unfocused_slot_accepts_any_task(self):
        ref = DetailsRef()

        assert ref.set(Details(task_id=3))
        assert ref.get() == Details(task_id=3)

    def test_focus_refuses_other_tasks(self):
        ref = DetailsRef()
        ref.focus(3)

        assert not ref.set(Details(task_id=4))
        assert ref.get() is None

    def test_refocus_discards_previous_task_details(self):
        ref = DetailsRef()
        ref.focus(3)
        ref.set(Details(task_id=3))

        ref.focus(4)

        assert ref.get() is None
        assert ref.focused_task_id == 4

    def test_refocus_same_task_keeps_details(self):
        ref = DetailsRef()
        ref.focus(3)
        ref.set(Details(task_id=3))

        ref.focus(3)

        assert ref.get() == Details(task_id=3)

    def test_clear(self):
        ref = DetailsRef()
        ref.focus(3)
        ref.set(Details(task_id=3))

        ref.clear()

        assert ref.get() is None
        assert ref.focused_task_id is None

    def test_concurrent_writer_and_reader(self):
        """Reads never observe a value for a task other than the focused one."""
        ref = DetailsRef()
        ref.focus(1)
        seen = []

        def writer():
            for _ in range(500):
                ref.set(Details(task_id=1))
                ref.set(Details(task_id=2))

        def reader():
            for _ in range(500):
                details = ref.get()
                if details is not None:
                    seen.append(details.task_id)

        threads = [threading.Thread(target=writer), threading.Thread(target=reader)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert set(seen) <= {1}

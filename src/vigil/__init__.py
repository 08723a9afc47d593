"""Vigil - live console for an async runtime's tasks and resources.

Mirrors the runtime's state from a stream of update batches:
- Interned field names and text shared across entities
- Task and resource lists with per-entity fields, timings and lints
- Poll-time histograms for the task under inspection
- Retention of entities the producer has stopped reporting

Usage:
    from vigil import ConsoleApp, ConsoleBackend, ConsoleConfig

    backend = ConsoleBackend()
    backend.start()
    # transport thread: backend.emit_update(update)

    app = ConsoleApp(backend, ConsoleConfig.from_yaml("vigil.yaml"))
    app.run()
"""

from vigil.state import State
from vigil.view import View
from vigil.backend import ConsoleBackend
from vigil.config import ConsoleConfig
from vigil.app import ConsoleApp

__all__ = [
    "State",
    "View",
    "ConsoleBackend",
    "ConsoleConfig",
    "ConsoleApp",
]

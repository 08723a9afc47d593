"""Input events consumed by the view state machine.

Keys use Textual's key names ("enter", "escape", "up", "r", ...), so a
``textual.events.Key`` converts with ``KeyEvent.from_textual``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from textual import events


@dataclass(frozen=True)
class KeyEvent:
    key: str

    @classmethod
    def from_textual(cls, event: "events.Key") -> KeyEvent:
        return cls(key=event.key)


def is_space(event: KeyEvent) -> bool:
    return event.key == "space"


def should_quit(event: KeyEvent) -> bool:
    return event.key in ("q", "ctrl+c")


def is_up(event: KeyEvent) -> bool:
    return event.key in ("up", "k")


def is_down(event: KeyEvent) -> bool:
    return event.key in ("down", "j")


__all__ = ["KeyEvent", "is_space", "should_quit", "is_up", "is_down"]

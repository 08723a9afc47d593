"""State Schema - Decoded metadata and field values.

Wire metadata and fields are converted into these types on ingestion. All
repeated text (targets, field names) is held through ``InternedStr``
handles owned by the pool in ``State``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from vigil.intern import InternedStr


class Visibility(Enum):
    """Whether a substate's list is the one on screen."""

    SHOW = auto()
    HIDE = auto()


class Temporality(Enum):
    LIVE = auto()
    PAUSED = auto()


class ValueKind(Enum):
    BOOL = auto()
    STR = auto()
    U64 = auto()
    I64 = auto()
    DEBUG = auto()


_WIRE_KINDS = {
    "bool": ValueKind.BOOL,
    "str": ValueKind.STR,
    "u64": ValueKind.U64,
    "i64": ValueKind.I64,
    "debug": ValueKind.DEBUG,
}


@dataclass(frozen=True, slots=True)
class FieldValue:
    """Tagged field value.

    ``DEBUG`` carries preformatted text; it renders exactly like ``STR``.
    """

    kind: ValueKind
    value: bool | int | str

    @classmethod
    def from_wire(cls, wire_kind: str, raw: bool | int | str) -> FieldValue:
        return cls(_WIRE_KINDS[wire_kind], raw)

    def ensure_nonempty(self) -> FieldValue | None:
        """Return None for empty text, otherwise self."""
        match self.kind:
            case ValueKind.STR | ValueKind.DEBUG:
                return self if self.value != "" else None
            case ValueKind.BOOL | ValueKind.U64 | ValueKind.I64:
                return self

    def __str__(self) -> str:
        match self.kind:
            case ValueKind.BOOL:
                return "true" if self.value else "false"
            case ValueKind.STR | ValueKind.DEBUG:
                return str(self.value)
            case ValueKind.U64 | ValueKind.I64:
                return str(int(self.value))


@dataclass(frozen=True, slots=True)
class Field:
    name: InternedStr
    value: FieldValue

    SPAWN_LOCATION = "spawn.location"
    NAME = "task.name"


@dataclass(frozen=True)
class Metadata:
    """Decoded callsite metadata.

    ``field_names`` is positional: wire fields index into it, and an index
    is only valid for fields that carry this same ``id``.
    """

    id: int
    target: InternedStr
    field_names: tuple[InternedStr, ...]
    name: str = ""


__all__ = [
    "Visibility",
    "Temporality",
    "ValueKind",
    "FieldValue",
    "Field",
    "Metadata",
]

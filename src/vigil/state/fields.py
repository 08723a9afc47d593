"""Field decoding and presentation.

Wire fields name themselves either inline or by index into the metadata of
the span that recorded them. Decoding resolves the name, normalizes the
value and interns the name; malformed fields are dropped with a warning and
never abort the surrounding update.
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import TYPE_CHECKING, Iterable

from rich.text import Text

from vigil import wire
from vigil.state.schema import Field, FieldValue, Metadata, ValueKind
from vigil.styles import Styles

if TYPE_CHECKING:
    from vigil.intern import Strings

_logger = logging.getLogger(__name__)

# Matches the dependency-cache prefix of a path, e.g.
# /home/me/.cargo/registry/src/index.crates.io-6f17d22bba15001f/
_REGISTRY_PATH = re.compile(r".*/\.cargo(/registry/src/[^/]*/|/git/checkouts/)")
REGISTRY_ALIAS = "<cargo>/"


def truncate_registry_path(path: str) -> str:
    """Replace the package-cache prefix of ``path`` with a short alias."""
    return _REGISTRY_PATH.sub(REGISTRY_ALIAS, path, count=1)


def format_location(location: wire.Location | None) -> str:
    if location is None:
        return "<unknown location>"
    if location.file is not None:
        location = replace(location, file=truncate_registry_path(location.file))
    return str(location)


def metadata_from_wire(pb: wire.Metadata, meta_id: int, strings: "Strings") -> Metadata:
    return Metadata(
        id=meta_id,
        target=strings.string(pb.target),
        field_names=tuple(strings.string(name) for name in pb.field_names),
        name=pb.name,
    )


def decode_field(pb: wire.Field, meta: Metadata, strings: "Strings") -> Field | None:
    """Convert a wire field into a ``Field`` using the span's metadata.

    Returns None when the name cannot be resolved (metadata id mismatch,
    index out of range, no name at all), when the value is missing, or when
    the value is empty text. The returned field holds one reference on its
    interned name.
    """
    name_handle = None
    if pb.str_name is None:
        if pb.name_idx is None:
            _logger.warning("skipping field with no name (metadata id=%d)", meta.id)
            return None
        if pb.metadata_id != meta.id:
            _logger.warning(
                "skipping malformed field name (metadata id mismatch): "
                "task.meta_id=%d field.meta_id=%s field.name_index=%d target=%s",
                meta.id,
                pb.metadata_id,
                pb.name_idx,
                meta.target,
            )
            return None
        if not 0 <= pb.name_idx < len(meta.field_names):
            _logger.warning(
                "missing field name for index: meta_id=%d field.name_index=%d "
                "(metadata has %d field names)",
                meta.id,
                pb.name_idx,
                len(meta.field_names),
            )
            return None
        name_handle = meta.field_names[pb.name_idx]
    name_text = pb.str_name if name_handle is None else str(name_handle)

    raw = pb.value()
    if raw is None:
        _logger.warning("missing field value for field %r (metadata id=%d)", name_text, meta.id)
        return None
    value = FieldValue.from_wire(*raw).ensure_nonempty()
    if value is None:
        return None

    if name_text == Field.SPAWN_LOCATION:
        value = truncate_value(value)

    if name_handle is None:
        name = strings.string(name_text)
    else:
        name = strings.acquire(name_handle)
    return Field(name=name, value=value)


def truncate_value(value: FieldValue) -> FieldValue:
    """Apply ``truncate_registry_path`` to text values, tagging them DEBUG."""
    match value.kind:
        case ValueKind.STR | ValueKind.DEBUG:
            return FieldValue(ValueKind.DEBUG, truncate_registry_path(str(value.value)))
        case _:
            return value


def decode_fields(
    pbs: Iterable[wire.Field], meta: Metadata, strings: "Strings"
) -> list[Field]:
    fields = []
    for pb in pbs:
        decoded = decode_field(pb, meta, strings)
        if decoded is not None:
            fields.append(decoded)
    return sort_fields(fields)


def _sort_key(field: Field) -> tuple[int, str]:
    if field.name == Field.NAME:
        return (0, "")
    if field.name == Field.SPAWN_LOCATION:
        return (2, "")
    return (1, str(field.name))


def sort_fields(fields: Iterable[Field]) -> list[Field]:
    """Task name first, spawn location last, everything else by name."""
    return sorted(fields, key=_sort_key)


def format_fields(fields: Iterable[Field], styles: Styles | None = None) -> list[Text]:
    """Render fields as ``name=value `` rows in display order."""
    styles = styles or Styles()
    key_style = styles.fg("bright_blue") + styles.modifier(bold=True)
    delim_style = styles.fg("bright_blue") + styles.modifier(dim=True)
    val_style = styles.fg("yellow")

    rows = []
    for field in sort_fields(fields):
        row = Text()
        row.append(str(field.name), style=key_style)
        row.append("=", style=delim_style)
        row.append(f"{field.value} ", style=val_style)
        rows.append(row)
    return rows


__all__ = [
    "REGISTRY_ALIAS",
    "truncate_registry_path",
    "format_location",
    "metadata_from_wire",
    "decode_field",
    "decode_fields",
    "sort_fields",
    "format_fields",
]

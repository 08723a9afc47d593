"""Terminal styling shared by the state formatters and the views.

Styles degrade with the terminal: fewer colors under a restricted palette,
no color at all under ``Palette.NO_COLORS``, ASCII glyphs when UTF-8 is off.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from rich.style import Style
from rich.text import Text


class Palette(Enum):
    NO_COLORS = "none"
    ANSI_8 = "8"
    ANSI_16 = "16"
    ALL = "all"


# Unit suffix -> color, slowest units loudest
_UNIT_COLORS = {
    "ns": "bright_black",
    "µs": "bright_black",
    "us": "bright_black",
    "ms": "green",
    "s": "yellow",
    "m": "bright_red",
    "h": "red",
}


@dataclass(frozen=True)
class Styles:
    palette: Palette = Palette.ALL
    utf8: bool = True

    def fg(self, color: str) -> Style:
        """Foreground style for ``color``, degraded to the palette."""
        if self.palette is Palette.NO_COLORS:
            return Style()
        if self.palette is Palette.ANSI_8 and color.startswith("bright_"):
            color = color.removeprefix("bright_")
            if color == "black":
                color = "white"
        return Style(color=color)

    def modifier(self, bold: bool = False, dim: bool = False, reverse: bool = False) -> Style:
        return Style(bold=bold or None, dim=dim or None, reverse=reverse or None)

    def if_utf8(self, utf8: str, ascii: str) -> str:
        return utf8 if self.utf8 else ascii

    def warning_glyph(self) -> Text:
        return Text(self.if_utf8("⚠ ", "/!\\ "), style=self.fg("yellow"))

    def time_units(self, text: str) -> Text:
        """Color the unit suffix of a formatted duration such as ``12.3ms``."""
        number = text.rstrip("abcdefghijklmnopqrstuvwxyzµ")
        unit = text[len(number):]
        if not self.utf8 and unit == "µs":
            unit = "us"
        styled = Text(number)
        styled.append(unit, style=self.fg(_UNIT_COLORS.get(unit, "white")))
        return styled

    def header_style(self) -> Style:
        return self.fg("bright_blue") + self.modifier(bold=True)


__all__ = ["Palette", "Styles"]

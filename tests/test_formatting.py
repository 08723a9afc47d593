"""Tests for duration formatting and terminal styles.

These are pure functions with no side effects - ideal for unit testing.
"""

from __future__ import annotations

from datetime import timedelta

import pytest
from rich.style import Style

from vigil.formatting import format_duration, format_nanos
from vigil.styles import Palette, Styles


class TestFormatDuration:
    """Tests for format_duration function."""

    @pytest.mark.parametrize(
        "duration,expected",
        [
            (timedelta(0), "0.000ns"),
            (timedelta(microseconds=1), "1.000µs"),
            (timedelta(microseconds=250), "250.0µs"),
            (timedelta(milliseconds=12), "12.00ms"),
            (timedelta(seconds=1.5), "1.500s"),
            (timedelta(seconds=59), "59.00s"),
            (timedelta(minutes=2, seconds=30), "2.5m"),
            (timedelta(hours=3), "3.0h"),
        ],
    )
    def test_units(self, duration: timedelta, expected: str) -> None:
        assert format_duration(duration) == expected

    def test_precision(self) -> None:
        assert format_duration(timedelta(seconds=1.23456), precision=2) == "1.2s"


class TestFormatNanos:
    """Tests for format_nanos, used for histogram values."""

    def test_sub_microsecond(self) -> None:
        assert format_nanos(512) == "512.0ns"

    def test_microseconds(self) -> None:
        assert format_nanos(1_500) == "1.500µs"


class TestStyles:
    """Tests for palette degradation."""

    def test_no_colors_drops_color(self) -> None:
        assert Styles(palette=Palette.NO_COLORS).fg("red") == Style()

    def test_full_palette_keeps_color(self) -> None:
        assert Styles().fg("bright_blue").color.name == "bright_blue"

    def test_ansi8_strips_bright(self) -> None:
        styles = Styles(palette=Palette.ANSI_8)

        assert styles.fg("bright_blue").color.name == "blue"
        assert styles.fg("bright_black").color.name == "white"

    def test_if_utf8(self) -> None:
        assert Styles(utf8=True).if_utf8("✓", "ok") == "✓"
        assert Styles(utf8=False).if_utf8("✓", "ok") == "ok"

    def test_time_units_splits_suffix(self) -> None:
        text = Styles().time_units("12.00ms")

        assert text.plain == "12.00ms"
        assert text.spans[0].start == len("12.00")

    def test_time_units_ascii_micro(self) -> None:
        assert Styles(utf8=False).time_units("3.000µs").plain == "3.000us"

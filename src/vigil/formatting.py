"""Shared formatting utilities for the console views.

Usage:
    from vigil.formatting import format_duration
"""

from __future__ import annotations

from datetime import timedelta

# Updates arrive about once a second, so four significant figures are plenty
# and leave room for the unit in a ten-column cell.
DUR_LEN = 10
DUR_PRECISION = 4

_UNITS = (
    ("s", 1.0),
    ("ms", 1e-3),
    ("µs", 1e-6),
    ("ns", 1e-9),
)


def format_duration(duration: timedelta, precision: int = DUR_PRECISION) -> str:
    """Format a duration with at most ``precision`` significant figures.

    Examples:
        >>> format_duration(timedelta(seconds=1.5))
        '1.500s'
        >>> format_duration(timedelta(milliseconds=12))
        '12.00ms'
        >>> format_duration(timedelta(0))
        '0.000ns'
    """
    return _format_seconds(duration.total_seconds(), precision)


def format_nanos(nanos: int, precision: int = DUR_PRECISION) -> str:
    return _format_seconds(nanos * 1e-9, precision)


def _format_seconds(seconds: float, precision: int) -> str:
    if seconds >= 3600:
        return f"{seconds / 3600:.1f}h"
    if seconds >= 60:
        return f"{seconds / 60:.1f}m"
    for unit, scale in _UNITS:
        if seconds >= scale:
            return _with_precision(seconds / scale, precision) + unit
    return _with_precision(seconds / 1e-9, precision) + "ns"


def _with_precision(value: float, precision: int) -> str:
    if value == 0:
        return f"{0:.{precision - 1}f}"
    digits = len(str(int(value)))
    decimals = max(precision - digits, 0)
    return f"{value:.{decimals}f}"


__all__ = ["DUR_LEN", "DUR_PRECISION", "format_duration", "format_nanos"]

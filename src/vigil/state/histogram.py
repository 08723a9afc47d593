"""Poll-time histogram decoding.

Task details carry a serialized HDR histogram of poll durations (in
nanoseconds). Only decoding is supported here: the V2 format and its
deflate-wrapped variant. Statistics stop at count/min/max.

V2 layout (big-endian):
    cookie u32 | payload_len u32 | normalizing_offset u32 | significant_digits u32
    lowest u64 | highest u64 | int_to_double_ratio f64 | counts[payload_len]

Counts are zig-zag LEB128 varints; a negative count ``-n`` stands for ``n``
consecutive empty buckets.
"""

from __future__ import annotations

import math
import struct
import zlib
from dataclasses import dataclass

V2_COOKIE_BASE = 0x1C849303
V2_COMPRESSED_COOKIE_BASE = 0x1C849304
# Encoders OR the word size into bits 4-7 of the cookie. V2 counts are
# varints, so only the 8-byte marker (0x10) and the bare base are accepted.
_WORD_SIZE_MASK = 0xF0
_WORD_SIZES = (0x00, 0x10)
V2_COOKIE = V2_COOKIE_BASE | 0x10
V2_COMPRESSED_COOKIE = V2_COMPRESSED_COOKIE_BASE | 0x10

_HEADER = struct.Struct(">IIIIQQd")
_COMPRESSED_HEADER = struct.Struct(">II")
_MAX_SIGNIFICANT_DIGITS = 5
_MAX_VALUE = (1 << 63) - 1


class HistogramDecodeError(ValueError):
    """Raised when a histogram blob cannot be decoded."""


@dataclass(frozen=True)
class DurationHistogram:
    """A decoded histogram of durations in nanoseconds."""

    lowest_trackable: int
    highest_trackable: int
    significant_digits: int
    counts: tuple[int, ...]

    @property
    def total_count(self) -> int:
        return sum(self.counts)

    @property
    def _layout(self) -> tuple[int, int, int]:
        """(unit_magnitude, sub_bucket_half_count_magnitude, sub_bucket_half_count)."""
        return _layout(self.lowest_trackable, self.significant_digits)

    def value_for(self, index: int) -> int:
        """Lowest value that lands in bucket slot ``index``."""
        unit_magnitude, half_magnitude, half_count = self._layout
        bucket_index = (index >> half_magnitude) - 1
        sub_bucket_index = (index & (half_count - 1)) + half_count
        if bucket_index < 0:
            sub_bucket_index -= half_count
            bucket_index = 0
        return sub_bucket_index << (bucket_index + unit_magnitude)

    def _range_for(self, index: int) -> int:
        unit_magnitude, half_magnitude, _ = self._layout
        bucket_index = max((index >> half_magnitude) - 1, 0)
        return 1 << (unit_magnitude + bucket_index)

    def min(self) -> int:
        for index, count in enumerate(self.counts):
            if count:
                return self.value_for(index)
        return 0

    def max(self) -> int:
        for index in range(len(self.counts) - 1, -1, -1):
            if self.counts[index]:
                return self.value_for(index) + self._range_for(index) - 1
        return 0


def _layout(lowest: int, significant_digits: int) -> tuple[int, int, int]:
    largest_single_unit = 2 * 10**significant_digits
    unit_magnitude = int(math.floor(math.log2(lowest)))
    sub_bucket_count_magnitude = int(math.ceil(math.log2(largest_single_unit)))
    half_magnitude = max(sub_bucket_count_magnitude, 1) - 1
    half_count = 1 << half_magnitude
    return unit_magnitude, half_magnitude, half_count


def _counts_len(lowest: int, highest: int, significant_digits: int) -> int:
    unit_magnitude, half_magnitude, half_count = _layout(lowest, significant_digits)
    sub_bucket_count = half_count * 2
    smallest_untrackable = sub_bucket_count << unit_magnitude
    buckets = 1
    while smallest_untrackable <= highest:
        if smallest_untrackable > _MAX_VALUE // 2:
            buckets += 1
            break
        smallest_untrackable <<= 1
        buckets += 1
    return (buckets + 1) * half_count


def _cookie_base(cookie: int) -> int:
    if (cookie & _WORD_SIZE_MASK) not in _WORD_SIZES:
        raise HistogramDecodeError(f"unsupported word size in histogram cookie {cookie:#x}")
    return cookie & ~_WORD_SIZE_MASK


def _read_varint(buf: bytes, pos: int) -> tuple[int, int]:
    value = 0
    for shift in range(0, 56, 7):
        if pos >= len(buf):
            raise HistogramDecodeError("truncated varint in histogram counts")
        byte = buf[pos]
        pos += 1
        value |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return value, pos
    # The ninth byte contributes all eight bits
    if pos >= len(buf):
        raise HistogramDecodeError("truncated varint in histogram counts")
    value |= buf[pos] << 56
    return value, pos + 1


def _zigzag(value: int) -> int:
    return (value >> 1) ^ -(value & 1)


def _decode_v2(blob: bytes) -> DurationHistogram:
    if len(blob) < _HEADER.size:
        raise HistogramDecodeError(f"histogram header truncated ({len(blob)} bytes)")
    (
        cookie,
        payload_len,
        normalizing_offset,
        significant_digits,
        lowest,
        highest,
        _ratio,
    ) = _HEADER.unpack_from(blob)
    if _cookie_base(cookie) != V2_COOKIE_BASE:
        raise HistogramDecodeError(f"unknown histogram cookie {cookie:#x}")
    if normalizing_offset != 0:
        raise HistogramDecodeError("normalizing offset is not supported")
    if significant_digits > _MAX_SIGNIFICANT_DIGITS:
        raise HistogramDecodeError(f"invalid significant digits {significant_digits}")
    if lowest < 1 or highest < 2 * lowest:
        raise HistogramDecodeError(f"invalid trackable range [{lowest}, {highest}]")

    payload = blob[_HEADER.size:_HEADER.size + payload_len]
    if len(payload) != payload_len:
        raise HistogramDecodeError(
            f"histogram payload truncated ({len(payload)} of {payload_len} bytes)"
        )

    max_len = _counts_len(lowest, highest, significant_digits)
    counts: list[int] = []
    pos = 0
    while pos < len(payload):
        raw, pos = _read_varint(payload, pos)
        count = _zigzag(raw)
        if count < 0:
            counts.extend([0] * -count)
        else:
            counts.append(count)
        if len(counts) > max_len:
            raise HistogramDecodeError("histogram counts exceed the trackable range")

    return DurationHistogram(
        lowest_trackable=lowest,
        highest_trackable=highest,
        significant_digits=significant_digits,
        counts=tuple(counts),
    )


def decode_histogram(blob: bytes) -> DurationHistogram:
    """Decode a serialized histogram, plain or deflate-wrapped.

    Raises:
        HistogramDecodeError: the blob is truncated, has an unknown cookie,
            an unsupported header or corrupt counts.
    """
    if len(blob) < 4:
        raise HistogramDecodeError("histogram blob too short")
    (cookie,) = struct.unpack_from(">I", blob)
    if _cookie_base(cookie) != V2_COMPRESSED_COOKIE_BASE:
        return _decode_v2(blob)

    if len(blob) < _COMPRESSED_HEADER.size:
        raise HistogramDecodeError("compressed histogram header truncated")
    _, length = _COMPRESSED_HEADER.unpack_from(blob)
    compressed = blob[_COMPRESSED_HEADER.size:_COMPRESSED_HEADER.size + length]
    try:
        inner = zlib.decompress(compressed)
    except zlib.error as e:
        raise HistogramDecodeError(f"corrupt compressed histogram: {e}") from e
    return _decode_v2(inner)


__all__ = [
    "V2_COOKIE",
    "V2_COOKIE_BASE",
    "V2_COMPRESSED_COOKIE",
    "V2_COMPRESSED_COOKIE_BASE",
    "DurationHistogram",
    "HistogramDecodeError",
    "decode_histogram",
]

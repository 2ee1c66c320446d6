"""
Timestamp conversions.

All timestamps are integer microseconds. Conversions use integer arithmetic
only; division truncates toward zero so negative inputs behave like C integer
division rather than Python floor division.
"""

from __future__ import annotations

from lidar_align.common.constants import NS_PER_US, US_PER_SEC


def _trunc_div(value: int, divisor: int) -> int:
    q = abs(value) // divisor
    return -q if value < 0 else q


def stamp_to_us(sec: int, nanosec: int) -> int:
    """Header stamp (sec, nanosec) -> whole microseconds."""
    return int(sec) * US_PER_SEC + _trunc_div(int(nanosec), NS_PER_US)


def ns_to_us(ns: int) -> int:
    """Nanoseconds -> whole microseconds (truncating)."""
    return _trunc_div(int(ns), NS_PER_US)


def us_to_sec(us: int) -> float:
    return float(us) / US_PER_SEC

"""
CSV pose record parsing (maplab trajectory export).

Line layout, comma separated, at least 9 fields:

    timestamp_ns, <unused>, x, y, z, qw, qx, qy, qz

Field 1 is never read. Extra trailing fields are ignored. Lines that are
empty, start with '#', or have fewer than 9 fields are skipped (None).

Numeric fields are NOT validated: malformed numbers raise ValueError to the
caller.
"""

from __future__ import annotations

from typing import Optional, TextIO, Tuple

from lidar_align.common.constants import (
    CSV_COMMENT_MARKER,
    CSV_DELIMITER,
    CSV_MIN_FIELDS,
    CSV_RW,
    CSV_RX,
    CSV_RY,
    CSV_RZ,
    CSV_TIME,
    CSV_X,
    CSV_Y,
    CSV_Z,
)
from lidar_align.common.timestamps import ns_to_us
from lidar_align.common.transform import Transform


def split_csv_fields(line: str) -> list[str]:
    """
    Split on the delimiter without trimming whitespace.

    A terminating delimiter does not produce a trailing empty field
    ("a,b," -> ["a", "b"]); empty fields elsewhere are kept.
    """
    if not line:
        return []
    fields = line.split(CSV_DELIMITER)
    if fields[-1] == "":
        fields.pop()
    return fields


def parse_csv_transform_line(line: str) -> Optional[Tuple[int, Transform]]:
    """
    Parse one record into (timestamp_us, Transform), or None to skip.

    Raises:
        ValueError: a required field is not a valid number
    """
    line = line.rstrip("\r\n")
    if not line or line.startswith(CSV_COMMENT_MARKER):
        return None

    data = split_csv_fields(line)
    if len(data) < CSV_MIN_FIELDS:
        return None

    stamp = ns_to_us(int(data[CSV_TIME]))
    T = Transform.from_components(
        float(data[CSV_X]),
        float(data[CSV_Y]),
        float(data[CSV_Z]),
        float(data[CSV_RW]),
        float(data[CSV_RX]),
        float(data[CSV_RY]),
        float(data[CSV_RZ]),
    )
    return stamp, T


def get_next_csv_transform(stream: TextIO) -> Optional[Tuple[int, Transform]]:
    """Read exactly one line from `stream` and parse it (None at end of input too)."""
    return parse_csv_transform_line(stream.readline())

"""
Point representations and schema detection.

Three point layouts exist, from richest to poorest:

    FULL                 x, y, z, intensity, time_offset_us (+ reflectivity, ring)
    POSITION_INTENSITY   x, y, z, intensity
    POSITION_ONLY        x, y, z

A record's declared field names (its schema) select exactly one of them via
`select_point_kind`. Every normalized frame is stored in FULL_POINT_DTYPE
regardless of which layout was read; attributes the source did not carry are
zero.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

import numpy as np

from lidar_align.common.constants import FIELD_INTENSITY, FIELD_TIME_OFFSET
from lidar_align.common.timestamps import stamp_to_us


FULL_POINT_DTYPE = np.dtype([
    ("x", np.float32),
    ("y", np.float32),
    ("z", np.float32),
    ("intensity", np.float32),
    ("time_offset_us", np.int32),
    ("reflectivity", np.uint16),
    ("ring", np.uint8),
])

XYZI_POINT_DTYPE = np.dtype([
    ("x", np.float32),
    ("y", np.float32),
    ("z", np.float32),
    ("intensity", np.float32),
])

XYZ_POINT_DTYPE = np.dtype([
    ("x", np.float32),
    ("y", np.float32),
    ("z", np.float32),
])


class PointKind(Enum):
    FULL = "full"
    POSITION_INTENSITY = "position_intensity"
    POSITION_ONLY = "position_only"

    @property
    def dtype(self) -> np.dtype:
        return _KIND_DTYPES[self]

    @property
    def checked_fields(self) -> tuple[str, ...]:
        """Fields that must be finite for a point to be kept (empty: no check)."""
        return _KIND_CHECKED_FIELDS[self]


_KIND_DTYPES = {
    PointKind.FULL: FULL_POINT_DTYPE,
    PointKind.POSITION_INTENSITY: XYZI_POINT_DTYPE,
    PointKind.POSITION_ONLY: XYZ_POINT_DTYPE,
}

_KIND_CHECKED_FIELDS = {
    PointKind.FULL: (),
    PointKind.POSITION_INTENSITY: ("x", "y", "z", "intensity"),
    PointKind.POSITION_ONLY: ("x", "y", "z"),
}


@dataclass(frozen=True)
class SchemaDescriptor:
    """Set of field names a point cloud record declares."""
    names: frozenset[str] = frozenset()

    @classmethod
    def from_fields(cls, fields: Iterable) -> "SchemaDescriptor":
        """Build from PointField-like objects (anything with `.name`) or plain names."""
        return cls(frozenset(getattr(f, "name", f) for f in fields))

    @property
    def has_timing(self) -> bool:
        return FIELD_TIME_OFFSET in self.names

    @property
    def has_intensity(self) -> bool:
        return FIELD_INTENSITY in self.names


def select_point_kind(schema: SchemaDescriptor) -> PointKind:
    if schema.has_timing:
        return PointKind.FULL
    if schema.has_intensity:
        return PointKind.POSITION_INTENSITY
    return PointKind.POSITION_ONLY


@dataclass(frozen=True)
class FrameHeader:
    stamp_sec: int = 0
    stamp_nanosec: int = 0
    frame_id: str = ""

    @classmethod
    def from_msg(cls, header) -> "FrameHeader":
        stamp = header.stamp
        return cls(
            stamp_sec=int(stamp.sec),
            stamp_nanosec=int(stamp.nanosec),
            frame_id=str(header.frame_id),
        )

    @property
    def stamp_us(self) -> int:
        return stamp_to_us(self.stamp_sec, self.stamp_nanosec)


@dataclass
class PointcloudFrame:
    """Normalized point cloud: FULL_POINT_DTYPE points plus the source header."""
    header: FrameHeader = field(default_factory=FrameHeader)
    points: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=FULL_POINT_DTYPE))

    def __post_init__(self) -> None:
        if self.points.dtype != FULL_POINT_DTYPE:
            raise ValueError(f"PointcloudFrame points must use FULL_POINT_DTYPE, got {self.points.dtype}")

    def __len__(self) -> int:
        return int(self.points.shape[0])

    def xyz(self) -> np.ndarray:
        """(N, 3) float32 positions."""
        return np.stack([self.points["x"], self.points["y"], self.points["z"]], axis=1)

    def is_finite(self) -> bool:
        """True if every populated float attribute of every point is finite."""
        return bool(
            np.isfinite(self.xyz()).all() and np.isfinite(self.points["intensity"]).all()
        )

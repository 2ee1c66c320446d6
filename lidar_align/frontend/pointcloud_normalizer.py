"""
Schema-aware point normalization.

One PointCloud2 record in, one PointcloudFrame out. The record's declared
fields select the richest layout that can be populated:

    time_offset_us declared       -> FULL, read as-is, no filtering
    intensity declared (no time)  -> XYZI, drop non-finite x/y/z/intensity
    neither                       -> XYZ,  drop non-finite x/y/z

Survivors keep their source order. The header is copied unchanged in every
branch. A frame with zero points is a valid result; deciding whether a load
produced enough data is the caller's job.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from lidar_align.common.point_types import (
    FULL_POINT_DTYPE,
    FrameHeader,
    PointcloudFrame,
    PointKind,
    SchemaDescriptor,
    select_point_kind,
)
from lidar_align.frontend.pointcloud2 import read_points


@dataclass
class NormalizedCloud:
    """Normalization result: the frame, the layout it was read with, and the drop count."""
    frame: PointcloudFrame
    kind: PointKind
    dropped_points: int = 0


def finite_mask(points: np.ndarray, names) -> np.ndarray:
    """Boolean mask of points whose `names` fields are all finite."""
    mask = np.ones(points.shape[0], dtype=bool)
    for name in names:
        mask &= np.isfinite(points[name])
    return mask


def _promote(points: np.ndarray) -> np.ndarray:
    out = np.zeros(points.shape[0], dtype=FULL_POINT_DTYPE)
    for name in points.dtype.names:
        out[name] = points[name]
    return out


def normalize_pointcloud(msg) -> NormalizedCloud:
    """
    Normalize one PointCloud2 record.

    Raises:
        ValueError: record lacks x/y/z or has a malformed layout
    """
    schema = SchemaDescriptor.from_fields(msg.fields)
    kind = select_point_kind(schema)
    header = FrameHeader.from_msg(msg.header)

    raw = read_points(msg, kind.dtype)
    if kind is PointKind.FULL:
        return NormalizedCloud(frame=PointcloudFrame(header=header, points=raw), kind=kind)

    keep = finite_mask(raw, kind.checked_fields)
    points = _promote(raw[keep])
    return NormalizedCloud(
        frame=PointcloudFrame(header=header, points=points),
        kind=kind,
        dropped_points=int(raw.shape[0] - points.shape[0]),
    )


def parse_pointcloud_msg(msg) -> PointcloudFrame:
    """Frame-only form of `normalize_pointcloud`."""
    return normalize_pointcloud(msg).frame

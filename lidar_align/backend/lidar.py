"""
LiDAR scan accumulator.

Receives normalized frames from the loader and keeps them, with the
per-source scan config, in arrival order. Counts scans and points so the
loader can stop at its scan limit and detect an empty load.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, List

from lidar_align.common.point_types import PointcloudFrame


@dataclass
class Scan:
    frame: PointcloudFrame
    config: Any = None

    @property
    def stamp_us(self) -> int:
        return self.frame.header.stamp_us

    def __len__(self) -> int:
        return len(self.frame)


class Lidar:
    """Ordered collection of scans from one sensor."""

    def __init__(self, lidar_id: str = "") -> None:
        self.lidar_id = lidar_id
        self.scans: List[Scan] = []
        self._total_points = 0

    def add_pointcloud(self, frame: PointcloudFrame, scan_config: Any = None) -> None:
        self.scans.append(Scan(frame=frame, config=scan_config))
        self._total_points += len(frame)

    def number_of_scans(self) -> int:
        return len(self.scans)

    def total_points(self) -> int:
        return self._total_points

    def __iter__(self) -> Iterator[Scan]:
        return iter(self.scans)

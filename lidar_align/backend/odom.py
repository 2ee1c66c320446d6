"""
Trajectory store.

Append-only list of (timestamp_us, Transform) samples. Insertion order is
kept exactly; samples are never sorted or de-duplicated here.
"""

from __future__ import annotations

from typing import Iterator, List, Tuple

import numpy as np

from lidar_align.common.timestamps import us_to_sec
from lidar_align.common.transform import Transform


class Odom:
    def __init__(self) -> None:
        self._samples: List[Tuple[int, Transform]] = []

    def add_transform_data(self, stamp: int, T: Transform) -> None:
        self._samples.append((int(stamp), T))

    def empty(self) -> bool:
        return not self._samples

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[Tuple[int, Transform]]:
        return iter(self._samples)

    def __getitem__(self, idx: int) -> Tuple[int, Transform]:
        return self._samples[idx]

    def stamps(self) -> np.ndarray:
        return np.array([s for s, _ in self._samples], dtype=np.int64)

    def transforms(self) -> List[Transform]:
        return [T for _, T in self._samples]

    def write_tum(self, tum_path: str) -> int:
        """
        Write the trajectory in TUM format.

        TUM format: timestamp x y z qx qy qz qw (timestamp in seconds).
        Returns the number of poses written.
        """
        with open(tum_path, "w", encoding="utf-8") as f:
            f.write("# timestamp x y z qx qy qz qw\n")
            for stamp, T in self._samples:
                x, y, z = T.translation
                qw, qx, qy, qz = T.rotation
                f.write(
                    f"{us_to_sec(stamp):.6f} {x:.6f} {y:.6f} {z:.6f} "
                    f"{qx:.6f} {qy:.6f} {qz:.6f} {qw:.6f}\n"
                )
        return len(self._samples)

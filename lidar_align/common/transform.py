"""
Rigid transform: translation + quaternion (w, x, y, z).

The loader passes quaternions through exactly as recorded. Nothing here
normalizes or validates the stored rotation; `to_matrix()` and `to_se3()` are
derived views for consumers and go through scipy, which normalizes the
quaternion for the derived result only.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np
from scipy.spatial.transform import Rotation


@dataclass(frozen=True)
class Transform:
    """
    Pose of a rigid body.

    Attributes:
        translation: (x, y, z)
        rotation: unit quaternion as (w, x, y, z), not checked
    """
    translation: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    rotation: Tuple[float, float, float, float] = (1.0, 0.0, 0.0, 0.0)

    @classmethod
    def from_components(
        cls,
        x: float,
        y: float,
        z: float,
        qw: float,
        qx: float,
        qy: float,
        qz: float,
    ) -> "Transform":
        return cls(
            translation=(float(x), float(y), float(z)),
            rotation=(float(qw), float(qx), float(qy), float(qz)),
        )

    @classmethod
    def identity(cls) -> "Transform":
        return cls()

    def translation_vector(self) -> np.ndarray:
        return np.array(self.translation, dtype=np.float64)

    def quaternion_xyzw(self) -> np.ndarray:
        """Quaternion in scipy / TUM order (x, y, z, w)."""
        w, x, y, z = self.rotation
        return np.array([x, y, z, w], dtype=np.float64)

    def to_matrix(self) -> np.ndarray:
        """Homogeneous 4x4 matrix."""
        T = np.eye(4, dtype=np.float64)
        T[:3, :3] = Rotation.from_quat(self.quaternion_xyzw()).as_matrix()
        T[:3, 3] = self.translation_vector()
        return T

    def to_se3(self) -> np.ndarray:
        """6D pose [x, y, z, rx, ry, rz] with rotation as a rotation vector."""
        rotvec = Rotation.from_quat(self.quaternion_xyzw()).as_rotvec()
        return np.concatenate([self.translation_vector(), rotvec])

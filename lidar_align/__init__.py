"""
lidar_align input loading.

Normalizes recorded LiDAR point clouds and pose trajectories (ROS bags and
CSV files) into the in-memory forms used by lidar/odometry alignment.

Subpackages:
- common/: point types, transforms, timestamps, params, load reports
- frontend/: decoding, normalization, parsing and the loader loops
- backend/: scan accumulator and trajectory store
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

__all__ = [
    "Loader",
    "LoaderParams",
    "LoadReport",
    "Lidar",
    "Odom",
    "Transform",
]

_LAZY_ATTRS: dict[str, tuple[str, str]] = {
    "Loader": ("lidar_align.frontend.loader", "Loader"),
    "LoaderParams": ("lidar_align.common.param_models", "LoaderParams"),
    "LoadReport": ("lidar_align.common.load_report", "LoadReport"),
    "Lidar": ("lidar_align.backend.lidar", "Lidar"),
    "Odom": ("lidar_align.backend.odom", "Odom"),
    "Transform": ("lidar_align.common.transform", "Transform"),
}


def __getattr__(name: str) -> Any:
    target = _LAZY_ATTRS.get(name)
    if target is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module_name, attr_name = target
    return getattr(import_module(module_name), attr_name)


def __dir__() -> list[str]:
    return sorted(set(globals().keys()) | set(_LAZY_ATTRS.keys()))

"""
Common package for lidar_align.

Shared types used by both frontend (loading) and backend (accumulation).
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

__all__ = [
    "LoadReport",
    "LoadStatus",
    "Transform",
    "constants",
]

_LAZY_ATTRS: dict[str, tuple[str, str | None]] = {
    "LoadReport": ("lidar_align.common.load_report", "LoadReport"),
    "LoadStatus": ("lidar_align.common.load_report", "LoadStatus"),
    "Transform": ("lidar_align.common.transform", "Transform"),
    # Expose as a submodule, but do not eagerly import it at package import time.
    "constants": ("lidar_align.common.constants", None),
}


def __getattr__(name: str) -> Any:
    target = _LAZY_ATTRS.get(name)
    if target is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module_name, attr_name = target
    module = import_module(module_name)
    return module if attr_name is None else getattr(module, attr_name)


def __dir__() -> list[str]:
    return sorted(set(globals().keys()) | set(_LAZY_ATTRS.keys()))

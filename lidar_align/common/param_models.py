"""Pydantic parameter models for lidar_align loading."""

from __future__ import annotations

import os
from typing import Any, Dict, List, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from lidar_align.common import constants


class BaseAlignParams(BaseModel):
    """Shared parameter base."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)


class LoaderParams(BaseAlignParams):
    """Loader parameter model."""

    use_n_scans: int = Field(constants.USE_N_SCANS_DEFAULT, ge=1)
    # None: no limit on pose records
    use_n_poses: int | None = Field(None, ge=1)
    pose_msgtypes: List[str] = Field(
        default_factory=lambda: list(constants.POSE_MSGTYPES_DEFAULT),
        min_length=1,
    )
    progress_every: int = Field(constants.PROGRESS_EVERY_DEFAULT, ge=1)

    @field_validator("pose_msgtypes")
    @classmethod
    def _known_pose_msgtypes(cls, value: List[str]) -> List[str]:
        unknown = [t for t in value if t not in constants.SUPPORTED_POSE_MSGTYPES]
        if unknown:
            raise ValueError(
                f"Unsupported pose message type(s) {unknown}; "
                f"expected any of {list(constants.SUPPORTED_POSE_MSGTYPES)}"
            )
        return value


class ScanParams(BaseAlignParams):
    """
    Per-source scan configuration.

    Handed to the point cloud accumulator with every frame; the loader does
    not interpret it.
    """

    min_point_distance: float = Field(constants.MIN_POINT_DISTANCE_DEFAULT, ge=0.0)
    max_point_distance: float = Field(constants.MAX_POINT_DISTANCE_DEFAULT, gt=0.0)
    keep_points_ratio: float = Field(constants.KEEP_POINTS_RATIO_DEFAULT, gt=0.0, le=1.0)
    min_return_intensity: float = constants.MIN_RETURN_INTENSITY_DEFAULT
    estimate_point_times: bool = False
    clockwise_lidar: bool = False
    motion_compensation: bool = True
    lidar_rpm: float = Field(constants.LIDAR_RPM_DEFAULT, gt=0.0)


def _params_root(path: str) -> Dict[str, Any]:
    """
    Top-level mapping of a params file.

    Accepts the plain layout (`loader:` / `scan:` at the root) and the ROS 2
    node layout, where the same sections sit under
    `<node or /**>: ros__parameters:`. An empty file reads as {}.

    Raises:
        ValueError: the document (or its ros__parameters block) is not a mapping
    """
    with open(path, encoding="utf-8") as f:
        doc = yaml.safe_load(f)
    if doc is None:
        return {}
    if not isinstance(doc, dict):
        raise ValueError(f"{path}: params file must be a mapping, got {type(doc).__name__}")

    if len(doc) == 1:
        node = next(iter(doc.values()))
        if isinstance(node, dict) and "ros__parameters" in node:
            doc = node["ros__parameters"] or {}
            if not isinstance(doc, dict):
                raise ValueError(f"{path}: ros__parameters must be a mapping")
    return doc


def load_params_yaml(path: str) -> Tuple[LoaderParams, ScanParams]:
    """
    Load loader and scan params from YAML.

    Expected layout (either section may be omitted):

        loader:
          use_n_scans: 50
        scan:
          max_point_distance: 60.0

    Raises:
        FileNotFoundError: path does not exist
        pydantic.ValidationError: unknown keys or out-of-range values
        ValueError: the file is not a mapping of sections
    """
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Params file not found: {path}")
    data = _params_root(path)
    loader = LoaderParams(**(data.get("loader") or {}))
    scan = ScanParams(**(data.get("scan") or {}))
    return loader, scan

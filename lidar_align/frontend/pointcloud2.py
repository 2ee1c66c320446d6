"""
PointCloud2 decoding - NO FILTERING.

Turns a PointCloud2-shaped message into numpy structured arrays using the
message's own field table (name, offset, datatype, count). Works with any
object exposing the sensor_msgs/PointCloud2 attributes, including messages
deserialized by `rosbags`.

Only the fields a caller asks for are decoded; other declared fields
(driver-specific extras, padding entries) are not inspected.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

import numpy as np

from lidar_align.common import constants
from lidar_align.common.constants import POSITION_FIELDS

_logger = logging.getLogger(__name__)

# Data type mapping from PointField constants to numpy dtypes
_DTYPE_MAP = {
    constants.POINTFIELD_INT8: np.int8,
    constants.POINTFIELD_UINT8: np.uint8,
    constants.POINTFIELD_INT16: np.int16,
    constants.POINTFIELD_UINT16: np.uint16,
    constants.POINTFIELD_INT32: np.int32,
    constants.POINTFIELD_UINT32: np.uint32,
    constants.POINTFIELD_FLOAT32: np.float32,
    constants.POINTFIELD_FLOAT64: np.float64,
}


def field_names(msg) -> list[str]:
    return [f.name for f in msg.fields]


def structured_dtype(msg, names: Optional[Iterable[str]] = None) -> np.dtype:
    """
    numpy dtype describing one point of `msg`, itemsize == point_step.

    If `names` is given, only those declared fields are described and the
    rest are skipped unchecked. Duplicate field names keep the first
    declaration.

    Raises:
        ValueError: a described field has an unknown datatype or extends past point_step
    """
    wanted = None if names is None else set(names)
    byte_order = ">" if bool(getattr(msg, "is_bigendian", False)) else "<"
    point_step = int(msg.point_step)

    out_names: list[str] = []
    formats: list = []
    offsets: list[int] = []
    for f in msg.fields:
        if f.name in out_names:
            continue
        if wanted is not None and f.name not in wanted:
            _logger.debug("Skipping PointCloud2 field %r (datatype %s)", f.name, f.datatype)
            continue
        base = _DTYPE_MAP.get(int(f.datatype))
        if base is None:
            raise ValueError(f"PointCloud2 field {f.name!r} has unknown datatype {f.datatype}")
        base = np.dtype(base).newbyteorder(byte_order)
        count = max(int(getattr(f, "count", 1)), 1)
        fmt = base if count == 1 else (base, (count,))
        if int(f.offset) + np.dtype(fmt).itemsize > point_step:
            raise ValueError(
                f"PointCloud2 field {f.name!r} at offset {f.offset} exceeds point_step {point_step}"
            )
        out_names.append(f.name)
        formats.append(fmt)
        offsets.append(int(f.offset))

    return np.dtype({"names": out_names, "formats": formats, "offsets": offsets, "itemsize": point_step})


def _raw_bytes(msg) -> np.ndarray:
    data = msg.data
    if isinstance(data, np.ndarray):
        return data.reshape(-1).view(np.uint8)
    return np.frombuffer(bytes(data), dtype=np.uint8)


def pointcloud2_to_structured(msg, names: Optional[Iterable[str]] = None) -> np.ndarray:
    """
    Decode every point of `msg` (height * width, row-major) into a structured array.

    `names` restricts decoding to those fields (all declared fields if None).
    Row padding (row_step > width * point_step) is skipped.
    """
    dtype = structured_dtype(msg, names)
    height = int(msg.height)
    width = int(msg.width)
    point_step = int(msg.point_step)
    n_points = height * width
    if n_points == 0:
        return np.zeros(0, dtype=dtype)

    row_bytes = width * point_step
    row_step = int(msg.row_step) or row_bytes
    if row_step < row_bytes:
        raise ValueError(f"PointCloud2 row_step {row_step} < width * point_step {row_bytes}")

    raw = _raw_bytes(msg)
    needed = row_step * (height - 1) + row_bytes
    if raw.size < needed:
        raise ValueError(f"PointCloud2 data has {raw.size} bytes, expected at least {needed}")

    if row_step == row_bytes:
        packed = raw[: n_points * point_step]
    else:
        rows = np.lib.stride_tricks.as_strided(raw, shape=(height, row_bytes), strides=(row_step, 1))
        packed = rows.reshape(-1)
    return np.ascontiguousarray(packed).view(dtype)


def read_points(msg, out_dtype: np.dtype) -> np.ndarray:
    """
    Read `msg` into an array of `out_dtype`.

    Fields of `out_dtype` the message declares are cast into place; fields it
    does not declare stay zero. Declared fields outside `out_dtype` are never
    decoded. Multi-count fields contribute their first element.

    Raises:
        ValueError: message lacks x, y or z, or a decoded field has a malformed layout
    """
    names = set(field_names(msg))
    missing = [n for n in POSITION_FIELDS if n not in names]
    if missing:
        raise ValueError(f"PointCloud2 message missing position field(s): {', '.join(missing)}")

    view = pointcloud2_to_structured(msg, out_dtype.names)
    out = np.zeros(view.shape[0], dtype=out_dtype)
    for name in out_dtype.names:
        if name not in view.dtype.names:
            continue
        column = view[name]
        if column.ndim > 1:
            column = column[:, 0]
        out[name] = column.astype(out_dtype[name], copy=False)
    return out

import os
import sys
from contextlib import contextmanager
from types import SimpleNamespace
from typing import Dict, List

import numpy as np
import pytest

# Ensure local package import works for pytest collection.
_TEST_DIR = os.path.dirname(__file__)
_PKG_ROOT = os.path.abspath(os.path.join(_TEST_DIR, ".."))
if _PKG_ROOT not in sys.path:
    sys.path.insert(0, _PKG_ROOT)

from lidar_align.common import constants  # noqa: E402
from lidar_align.frontend.bag_source import BagOpenError  # noqa: E402


# =============================================================================
# Message builders
# =============================================================================
# Messages are plain namespaces with the same attributes as the rosbags
# deserialized sensor_msgs / geometry_msgs types.

_DATATYPE_FROM_NUMPY = {
    np.dtype(np.int8): constants.POINTFIELD_INT8,
    np.dtype(np.uint8): constants.POINTFIELD_UINT8,
    np.dtype(np.int16): constants.POINTFIELD_INT16,
    np.dtype(np.uint16): constants.POINTFIELD_UINT16,
    np.dtype(np.int32): constants.POINTFIELD_INT32,
    np.dtype(np.uint32): constants.POINTFIELD_UINT32,
    np.dtype(np.float32): constants.POINTFIELD_FLOAT32,
    np.dtype(np.float64): constants.POINTFIELD_FLOAT64,
}


def _header(sec: int, nanosec: int, frame_id: str) -> SimpleNamespace:
    return SimpleNamespace(stamp=SimpleNamespace(sec=sec, nanosec=nanosec), frame_id=frame_id)


def _pointcloud_msg(points: np.ndarray, sec: int = 0, nanosec: int = 0, frame_id: str = "lidar"):
    """PointCloud2-shaped message whose layout is the (little-endian) dtype of `points`."""
    fields = []
    for name in points.dtype.names:
        sub, offset = points.dtype.fields[name][:2]
        fields.append(SimpleNamespace(
            name=name,
            offset=offset,
            datatype=_DATATYPE_FROM_NUMPY[sub.newbyteorder("=")],
            count=1,
        ))
    n = int(points.shape[0])
    return SimpleNamespace(
        header=_header(sec, nanosec, frame_id),
        height=1 if n else 0,
        width=n,
        fields=fields,
        is_bigendian=False,
        point_step=points.dtype.itemsize,
        row_step=points.dtype.itemsize * n,
        data=np.frombuffer(points.tobytes(), dtype=np.uint8),
        is_dense=False,
    )


def _pose_stamped(sec, nanosec, position, orientation_wxyz, frame_id="odom"):
    w, x, y, z = orientation_wxyz
    pose = SimpleNamespace(
        position=SimpleNamespace(x=position[0], y=position[1], z=position[2]),
        orientation=SimpleNamespace(x=x, y=y, z=z, w=w),
    )
    return SimpleNamespace(header=_header(sec, nanosec, frame_id), pose=pose)


@pytest.fixture
def make_pointcloud_msg():
    """Factory: structured numpy array -> PointCloud2-shaped message."""
    return _pointcloud_msg


@pytest.fixture
def make_pose_stamped():
    """Factory: (sec, nanosec, position, orientation_wxyz) -> PoseStamped-shaped message."""
    return _pose_stamped


@pytest.fixture
def make_pose_with_covariance_stamped():
    def _make(sec, nanosec, position, orientation_wxyz, frame_id="map"):
        inner = _pose_stamped(sec, nanosec, position, orientation_wxyz, frame_id)
        return SimpleNamespace(
            header=inner.header,
            pose=SimpleNamespace(pose=inner.pose, covariance=[0.0] * 36),
        )
    return _make


# =============================================================================
# Fake container source
# =============================================================================


class FakeBagSource:
    """In-memory bag: messages stored as (msgtype, msg) in record order."""

    def __init__(self, records: List[tuple]) -> None:
        self.records = list(records)
        self.closed = False
        self.yielded = 0

    def messages(self, msgtypes):
        wanted = set(msgtypes)
        for msgtype, msg in self.records:
            if msgtype in wanted:
                self.yielded += 1
                yield msgtype, msg


class FakeBagOpener:
    """Callable source opener backed by a dict path -> FakeBagSource."""

    def __init__(self, bags: Dict[str, FakeBagSource]) -> None:
        self.bags = bags
        self.opened: List[str] = []

    @contextmanager
    def __call__(self, bag_path: str):
        source = self.bags.get(bag_path)
        if source is None:
            raise BagOpenError(bag_path, "no such bag")
        self.opened.append(bag_path)
        try:
            yield source
        finally:
            source.closed = True


@pytest.fixture
def fake_bags():
    """Factory: {path: [(msgtype, msg), ...]} -> FakeBagOpener."""
    def _make(bags: Dict[str, list]) -> FakeBagOpener:
        return FakeBagOpener({path: FakeBagSource(recs) for path, recs in bags.items()})
    return _make


# =============================================================================
# Test data fixtures
# =============================================================================


@pytest.fixture
def xyz_dtype():
    return np.dtype([("x", np.float32), ("y", np.float32), ("z", np.float32)])


@pytest.fixture
def xyzi_dtype():
    return np.dtype([
        ("x", np.float32),
        ("y", np.float32),
        ("z", np.float32),
        ("intensity", np.float32),
    ])


@pytest.fixture
def xyzit_dtype():
    return np.dtype([
        ("x", np.float32),
        ("y", np.float32),
        ("z", np.float32),
        ("intensity", np.float32),
        ("time_offset_us", np.int32),
    ])


@pytest.fixture
def maplab_csv_lines():
    """A small maplab trajectory export with a header comment."""
    return [
        "# timestamp_ns,vertex_id,x,y,z,qw,qx,qy,qz",
        "1620000000123456,ignored,1.0,2.0,3.0,1.0,0.0,0.0,0.0",
        "1620000000223456,ignored,1.5,2.5,3.5,0.0,1.0,0.0,0.0",
        "1620000000023456,ignored,0.5,0.5,0.5,0.7071,0.0,0.7071,0.0",
    ]

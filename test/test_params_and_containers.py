"""
Parameter model and backend container tests.

Tests for:
- LoaderParams / ScanParams validation
- YAML loading (plain and ros__parameters-wrapped)
- Transform derived views
- Odom / Lidar accumulation and TUM export
- LoadReport serialization
"""

import json

import numpy as np
import pytest
from pydantic import ValidationError

from lidar_align.backend.lidar import Lidar
from lidar_align.backend.odom import Odom
from lidar_align.common import constants
from lidar_align.common.load_report import LoadReport, LoadStatus
from lidar_align.common.param_models import LoaderParams, ScanParams, load_params_yaml
from lidar_align.common.point_types import FULL_POINT_DTYPE, FrameHeader, PointcloudFrame
from lidar_align.common.transform import Transform


# =============================================================================
# Params
# =============================================================================


class TestParams:

    def test_defaults(self):
        params = LoaderParams()
        assert params.use_n_scans == constants.USE_N_SCANS_DEFAULT
        assert params.use_n_poses is None
        assert params.pose_msgtypes == list(constants.POSE_MSGTYPES_DEFAULT)

    def test_unknown_key_rejected(self):
        with pytest.raises(ValidationError):
            LoaderParams(use_n_scan=3)

    def test_scan_limit_must_be_positive(self):
        with pytest.raises(ValidationError):
            LoaderParams(use_n_scans=0)

    def test_unsupported_pose_type_rejected(self):
        with pytest.raises(ValidationError):
            LoaderParams(pose_msgtypes=["nav_msgs/msg/Odometry"])

    def test_assignment_validated(self):
        params = ScanParams()
        with pytest.raises(ValidationError):
            params.keep_points_ratio = 1.5

    def test_yaml_sections(self, tmp_path):
        path = tmp_path / "params.yaml"
        path.write_text(
            "loader:\n"
            "  use_n_scans: 50\n"
            "scan:\n"
            "  max_point_distance: 60.0\n"
            "  clockwise_lidar: true\n"
        )
        loader, scan = load_params_yaml(str(path))
        assert loader.use_n_scans == 50
        assert scan.max_point_distance == 60.0
        assert scan.clockwise_lidar is True
        assert scan.min_point_distance == constants.MIN_POINT_DISTANCE_DEFAULT

    def test_yaml_ros_parameters_wrapper(self, tmp_path):
        path = tmp_path / "params.yaml"
        path.write_text(
            "/**:\n"
            "  ros__parameters:\n"
            "    loader:\n"
            "      use_n_poses: 10\n"
        )
        loader, scan = load_params_yaml(str(path))
        assert loader.use_n_poses == 10
        assert scan == ScanParams()

    def test_yaml_named_node_wrapper(self, tmp_path):
        path = tmp_path / "params.yaml"
        path.write_text(
            "lidar_align:\n"
            "  ros__parameters:\n"
            "    scan:\n"
            "      lidar_rpm: 1200.0\n"
        )
        _, scan = load_params_yaml(str(path))
        assert scan.lidar_rpm == 1200.0

    def test_yaml_single_plain_section(self, tmp_path):
        path = tmp_path / "params.yaml"
        path.write_text("loader:\n  use_n_scans: 7\n")
        loader, _ = load_params_yaml(str(path))
        assert loader.use_n_scans == 7

    def test_yaml_not_a_mapping(self, tmp_path):
        path = tmp_path / "params.yaml"
        path.write_text("- loader\n- scan\n")
        with pytest.raises(ValueError, match="mapping"):
            load_params_yaml(str(path))

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "params.yaml"
        path.write_text("")
        loader, scan = load_params_yaml(str(path))
        assert loader == LoaderParams()

    def test_yaml_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_params_yaml(str(tmp_path / "nope.yaml"))

    def test_yaml_bad_value(self, tmp_path):
        path = tmp_path / "params.yaml"
        path.write_text("scan:\n  lidar_rpm: -1\n")
        with pytest.raises(ValidationError):
            load_params_yaml(str(path))


# =============================================================================
# Transform
# =============================================================================


class TestTransform:

    def test_identity_matrix(self):
        np.testing.assert_allclose(Transform.identity().to_matrix(), np.eye(4))

    def test_matrix_from_components(self):
        s = np.sqrt(0.5)
        T = Transform.from_components(1, 2, 3, s, 0, 0, s)  # 90 deg about z
        M = T.to_matrix()
        np.testing.assert_allclose(M[:3, 3], [1, 2, 3])
        np.testing.assert_allclose(M[:3, :3] @ [1, 0, 0], [0, 1, 0], atol=1e-12)

    def test_xyzw_order(self):
        T = Transform(rotation=(0.1, 0.2, 0.3, 0.4))
        np.testing.assert_allclose(T.quaternion_xyzw(), [0.2, 0.3, 0.4, 0.1])

    def test_se3(self):
        s = np.sqrt(0.5)
        se3 = Transform.from_components(0, 0, 0, s, s, 0, 0).to_se3()
        np.testing.assert_allclose(se3, [0, 0, 0, np.pi / 2, 0, 0], atol=1e-12)


# =============================================================================
# Containers
# =============================================================================


def _frame(n, sec=0):
    return PointcloudFrame(FrameHeader(sec, 0, "lidar"), np.zeros(n, dtype=FULL_POINT_DTYPE))


class TestLidar:

    def test_accumulates_in_order(self):
        lidar = Lidar()
        config = ScanParams()
        lidar.add_pointcloud(_frame(3, sec=2), config)
        lidar.add_pointcloud(_frame(0, sec=1), config)
        assert lidar.number_of_scans() == 2
        assert lidar.total_points() == 3
        assert [scan.stamp_us for scan in lidar] == [2_000_000, 1_000_000]


class TestOdom:

    def test_write_tum(self, tmp_path):
        odom = Odom()
        odom.add_transform_data(1_500_000, Transform((1.0, 2.0, 3.0), (0.5, 0.1, 0.2, 0.3)))
        odom.add_transform_data(500_000, Transform.identity())
        path = tmp_path / "traj.tum"

        assert odom.write_tum(str(path)) == 2

        lines = path.read_text().splitlines()
        assert lines[0].startswith("#")
        assert lines[1].split() == [
            "1.500000", "1.000000", "2.000000", "3.000000",
            "0.100000", "0.200000", "0.300000", "0.500000",
        ]
        assert lines[2].split()[0] == "0.500000"

    def test_stamps_dtype(self):
        odom = Odom()
        odom.add_transform_data(3, Transform())
        assert odom.stamps().dtype == np.int64
        assert odom.transforms() == [Transform()]


class TestLoadReport:

    def test_json(self):
        report = LoadReport(name="x", status=LoadStatus.EMPTY_RESULT, metrics={"n": np.int64(4)})
        data = json.loads(report.to_json())
        assert data["status"] == "empty_result"
        assert data["metrics"] == {"n": 4}
        assert not report.ok

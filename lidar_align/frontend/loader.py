"""
Loader - ingestion loops.

Pulls records one at a time from a source (ROS bag or CSV file), normalizes
them, and hands the results to backend containers:

    PointCloud2 (bag)        -> normalize_pointcloud -> Lidar.add_pointcloud
    PoseStamped (bag)        -> (stamp_us, Transform) -> Odom.add_transform_data
    maplab CSV (text file)   -> parse_csv_transform_line -> Odom.add_transform_data

Each call opens its source on entry and releases it on every exit path. A
call returns a LoadReport; SOURCE_UNAVAILABLE and EMPTY_RESULT are failures,
per-record skips and per-point drops are only counted.

Timestamp units differ by source and are kept as recorded:
  - bag:  header sec * 1e6 + header nanosec // 1000
  - CSV:  field 0 // 1000 (field 0 assumed to be nanoseconds)
"""

from __future__ import annotations

import logging
from contextlib import ExitStack, closing
from typing import Any, Callable, ContextManager, Optional

from lidar_align.backend.lidar import Lidar
from lidar_align.backend.odom import Odom
from lidar_align.common.constants import (
    POINTCLOUD_MSGTYPE,
    POSE_WITH_COVARIANCE_STAMPED_MSGTYPE,
)
from lidar_align.common.load_report import LoadReport, LoadStatus
from lidar_align.common.param_models import LoaderParams
from lidar_align.common.point_types import PointcloudFrame
from lidar_align.common.timestamps import stamp_to_us
from lidar_align.common.transform import Transform
from lidar_align.frontend.bag_source import BagOpenError, open_bag
from lidar_align.frontend.csv_pose_parser import parse_csv_transform_line
from lidar_align.frontend.pointcloud_normalizer import normalize_pointcloud, parse_pointcloud_msg

_logger = logging.getLogger(__name__)


class PoseRecordParseError(ValueError):
    """A CSV pose record had malformed numeric content."""

    def __init__(self, path: str, line_number: int, reason: str) -> None:
        super().__init__(f"{path}:{line_number}: malformed pose record ({reason})")
        self.path = path
        self.line_number = line_number


def transform_from_pose_msg(msgtype: str, msg) -> tuple[int, Transform]:
    """(stamp_us, Transform) from a PoseStamped / PoseWithCovarianceStamped message."""
    pose = msg.pose.pose if msgtype == POSE_WITH_COVARIANCE_STAMPED_MSGTYPE else msg.pose
    stamp = msg.header.stamp
    T = Transform.from_components(
        pose.position.x,
        pose.position.y,
        pose.position.z,
        pose.orientation.w,
        pose.orientation.x,
        pose.orientation.y,
        pose.orientation.z,
    )
    return stamp_to_us(stamp.sec, stamp.nanosec), T


class Loader:
    """
    Loads point clouds and trajectories into backend containers.

    `source_opener` opens a bag path and returns a context manager yielding an
    object with `messages(msgtypes)`; it must raise BagOpenError when the path
    cannot be read.
    """

    def __init__(
        self,
        params: Optional[LoaderParams] = None,
        source_opener: Callable[[str], ContextManager[Any]] = open_bag,
    ) -> None:
        self.params = params if params is not None else LoaderParams()
        self._source_opener = source_opener

    @staticmethod
    def parse_pointcloud_msg(msg) -> PointcloudFrame:
        return parse_pointcloud_msg(msg)

    def load_pointcloud_from_bag(self, bag_path: str, scan_config: Any, lidar: Lidar) -> LoadReport:
        """
        Normalize PointCloud2 messages from `bag_path` into `lidar`.

        Stops at source exhaustion or once `lidar` holds `use_n_scans` scans.
        """
        report = LoadReport(name="load_pointcloud_from_bag", source=bag_path)
        with ExitStack() as stack:
            try:
                source = stack.enter_context(self._source_opener(bag_path))
            except BagOpenError as exc:
                return self._source_unavailable(report, exc)

            messages = stack.enter_context(closing(source.messages((POINTCLOUD_MSGTYPE,))))
            for _, msg in messages:
                report.records_seen += 1
                self._log_progress("scan", report.records_seen)

                cloud = normalize_pointcloud(msg)
                report.points_dropped += cloud.dropped_points
                lidar.add_pointcloud(cloud.frame, scan_config)
                report.records_used += 1

                if lidar.number_of_scans() >= self.params.use_n_scans:
                    break

        report.metrics = {
            "scans": lidar.number_of_scans(),
            "total_points": lidar.total_points(),
        }
        if lidar.total_points() == 0:
            return self._empty_result(
                report,
                "No points were loaded, verify that the bag contains populated "
                f"messages of type {POINTCLOUD_MSGTYPE}",
            )
        _logger.info(
            "Loaded %d scans (%d points, %d non-finite dropped) from %s",
            report.records_used,
            lidar.total_points(),
            report.points_dropped,
            bag_path,
        )
        return report

    def load_tform_from_bag(self, bag_path: str, odom: Odom) -> LoadReport:
        """Append every pose message of `bag_path` to `odom`, in stored order."""
        report = LoadReport(name="load_tform_from_bag", source=bag_path)
        limit = self.params.use_n_poses
        with ExitStack() as stack:
            try:
                source = stack.enter_context(self._source_opener(bag_path))
            except BagOpenError as exc:
                return self._source_unavailable(report, exc)

            messages = stack.enter_context(closing(source.messages(tuple(self.params.pose_msgtypes))))
            for msgtype, msg in messages:
                report.records_seen += 1
                self._log_progress("transform", report.records_seen)

                stamp, T = transform_from_pose_msg(msgtype, msg)
                odom.add_transform_data(stamp, T)
                report.records_used += 1

                if limit is not None and report.records_used >= limit:
                    break

        report.metrics = {"poses": len(odom)}
        if odom.empty():
            return self._empty_result(report, "No odom messages found!")
        _logger.info("Loaded %d transforms from %s", report.records_used, bag_path)
        return report

    def load_tform_from_csv(self, csv_path: str, odom: Odom) -> LoadReport:
        """
        Append every pose record of a maplab CSV file to `odom`, in file order.

        Raises:
            PoseRecordParseError: a record has malformed numeric content
        """
        report = LoadReport(name="load_tform_from_csv", source=csv_path)
        with ExitStack() as stack:
            try:
                # Lines end at '\n' only; undecodable bytes survive as surrogates
                # so skipped lines never fail and numeric fields fail in parsing.
                f = stack.enter_context(
                    open(csv_path, "r", encoding="utf-8", errors="surrogateescape", newline="\n")
                )
            except OSError as exc:
                return self._source_unavailable(report, exc)

            for line_number, line in enumerate(f, start=1):
                report.records_seen += 1
                self._log_progress("transform", report.records_seen)
                try:
                    parsed = parse_csv_transform_line(line)
                except ValueError as exc:
                    raise PoseRecordParseError(csv_path, line_number, str(exc)) from exc

                if parsed is None:
                    report.records_skipped += 1
                    continue
                odom.add_transform_data(*parsed)
                report.records_used += 1

        report.metrics = {"poses": len(odom)}
        if odom.empty():
            return self._empty_result(report, f"No transforms found in {csv_path}")
        _logger.info(
            "Loaded %d transforms from %s (%d lines skipped)",
            report.records_used,
            csv_path,
            report.records_skipped,
        )
        return report

    def _log_progress(self, what: str, count: int) -> None:
        _logger.debug("Loading %s: %d", what, count)
        if count % self.params.progress_every == 0:
            _logger.info("Loading %s: %d", what, count)

    @staticmethod
    def _source_unavailable(report: LoadReport, exc: Exception) -> LoadReport:
        _logger.error("%s", exc)
        report.status = LoadStatus.SOURCE_UNAVAILABLE
        report.notes = str(exc)
        return report

    @staticmethod
    def _empty_result(report: LoadReport, message: str) -> LoadReport:
        _logger.error("%s", message)
        report.status = LoadStatus.EMPTY_RESULT
        report.notes = message
        return report

#!/usr/bin/env python3
"""
Load LiDAR scans and an odometry trajectory, and report what was ingested.

Usage:
  lidar_align_load --pointcloud-bag /path/to/lidar.bag --odom-bag /path/to/odom.bag
  lidar_align_load --pointcloud-bag /path/to/bag_dir --odom-csv poses.csv --tum-out poses.tum
  lidar_align_load --odom-csv poses.csv --params params.yaml --json /tmp/report.json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from lidar_align.backend.lidar import Lidar
from lidar_align.backend.odom import Odom
from lidar_align.common.param_models import LoaderParams, ScanParams, load_params_yaml
from lidar_align.frontend.loader import Loader


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Load and normalize LiDAR / odometry inputs")
    ap.add_argument("--pointcloud-bag", default="", help="Bag with sensor_msgs/PointCloud2 messages")
    odom_src = ap.add_mutually_exclusive_group()
    odom_src.add_argument("--odom-bag", default="", help="Bag with pose messages")
    odom_src.add_argument("--odom-csv", default="", help="maplab CSV trajectory")
    ap.add_argument("--params", default="", help="YAML params file (sections: loader, scan)")
    ap.add_argument("--tum-out", default="", help="If set, write the loaded trajectory in TUM format")
    ap.add_argument("--json", default="", help="If set, write the load reports to this path")
    ap.add_argument("--verbose", action="store_true", help="Per-record progress logging")
    return ap


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not (args.pointcloud_bag or args.odom_bag or args.odom_csv):
        print("ERROR: nothing to load (give --pointcloud-bag, --odom-bag or --odom-csv)", file=sys.stderr)
        return 2

    if args.params:
        loader_params, scan_params = load_params_yaml(args.params)
    else:
        loader_params, scan_params = LoaderParams(), ScanParams()
    loader = Loader(loader_params)

    reports = []
    lidar = Lidar()
    odom = Odom()
    if args.pointcloud_bag:
        reports.append(loader.load_pointcloud_from_bag(args.pointcloud_bag, scan_params, lidar))
    if args.odom_bag:
        reports.append(loader.load_tform_from_bag(args.odom_bag, odom))
    elif args.odom_csv:
        reports.append(loader.load_tform_from_csv(args.odom_csv, odom))

    for report in reports:
        print(
            f"{report.name}: {report.status.value} "
            f"(records={report.records_seen}, used={report.records_used}, "
            f"skipped={report.records_skipped}, points_dropped={report.points_dropped})"
        )

    if args.tum_out and not odom.empty():
        n = odom.write_tum(args.tum_out)
        print(f"Wrote {n} poses to {args.tum_out}")

    if args.json:
        with open(args.json, "w", encoding="utf-8") as f:
            json.dump([r.to_dict() for r in reports], f, indent=2)
        print(f"Wrote {args.json}")

    return 0 if all(r.ok for r in reports) else 1


if __name__ == "__main__":
    sys.exit(main())

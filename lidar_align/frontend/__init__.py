"""
Frontend package: reading and normalizing sensor inputs.

- pointcloud2: PointCloud2 field-table decoding
- pointcloud_normalizer: schema-aware point normalization
- csv_pose_parser: CSV trajectory records
- bag_source: ROS bag access via rosbags
- loader: ingestion loops feeding backend containers
- load_inputs: command-line entry point
"""

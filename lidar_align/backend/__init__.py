"""
Backend package: containers that receive loaded data.

- lidar: scan accumulator (Lidar, Scan)
- odom: trajectory store (Odom)
"""

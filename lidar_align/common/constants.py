"""
lidar_align loading constants.

=============================================================================
CONVENTION QUICK REFERENCE
=============================================================================

TIMESTAMPS:
  Internal: integer microseconds (int64), epoch taken from the source.
  Bag header stamp: sec * 1e6 + nanosec // 1000 (truncating).
  CSV field 0: raw integer // 1000 (truncating), source assumed nanoseconds.

QUATERNIONS:
  Internal storage order: (w, x, y, z).
  scipy Rotation order:   (x, y, z, w).
  No normalization is applied at load time.

POINT FIELDS:
  x, y, z          float32, metres, sensor frame
  intensity        float32
  time_offset_us   int32, relative to the frame header stamp
=============================================================================
"""

# =============================================================================
# Time units
# =============================================================================

US_PER_SEC = 1_000_000
NS_PER_US = 1_000

# =============================================================================
# Message types (rosbags naming, ROS 1 names are normalized to this form)
# =============================================================================

POINTCLOUD_MSGTYPE = "sensor_msgs/msg/PointCloud2"
POSE_STAMPED_MSGTYPE = "geometry_msgs/msg/PoseStamped"
POSE_WITH_COVARIANCE_STAMPED_MSGTYPE = "geometry_msgs/msg/PoseWithCovarianceStamped"

SUPPORTED_POSE_MSGTYPES = (
    POSE_STAMPED_MSGTYPE,
    POSE_WITH_COVARIANCE_STAMPED_MSGTYPE,
)
POSE_MSGTYPES_DEFAULT = (POSE_STAMPED_MSGTYPE,)

# =============================================================================
# Point cloud schema
# =============================================================================

FIELD_TIME_OFFSET = "time_offset_us"
FIELD_INTENSITY = "intensity"
POSITION_FIELDS = ("x", "y", "z")

# sensor_msgs/PointField datatype codes
POINTFIELD_INT8 = 1
POINTFIELD_UINT8 = 2
POINTFIELD_INT16 = 3
POINTFIELD_UINT16 = 4
POINTFIELD_INT32 = 5
POINTFIELD_UINT32 = 6
POINTFIELD_FLOAT32 = 7
POINTFIELD_FLOAT64 = 8

# =============================================================================
# CSV trajectory layout (fixed, maplab export)
#   timestamp_ns, <unused>, x, y, z, qw, qx, qy, qz
# =============================================================================

CSV_DELIMITER = ","
CSV_COMMENT_MARKER = "#"
CSV_TIME = 0
CSV_X = 2
CSV_Y = 3
CSV_Z = 4
CSV_RW = 5
CSV_RX = 6
CSV_RY = 7
CSV_RZ = 8
CSV_MIN_FIELDS = 9

# =============================================================================
# Loader defaults
# =============================================================================

# Effectively unlimited (INT32_MAX)
USE_N_SCANS_DEFAULT = 2_147_483_647
PROGRESS_EVERY_DEFAULT = 100

# Scan config defaults
MIN_POINT_DISTANCE_DEFAULT = 0.0
MAX_POINT_DISTANCE_DEFAULT = 100.0
KEEP_POINTS_RATIO_DEFAULT = 0.01
MIN_RETURN_INTENSITY_DEFAULT = -1.0
LIDAR_RPM_DEFAULT = 600.0

"""
Load report for ingestion calls.

Every loader entry point returns a LoadReport instead of a bare bool so the
caller can distinguish the failure classes and see what was filtered:

    SOURCE_UNAVAILABLE  container/file could not be opened; nothing was produced
    EMPTY_RESULT        source opened but yielded no usable points/poses
    OK                  at least one point/pose was produced

Per-record skips and per-point drops never fail a load; they are only counted
here (records_skipped, points_dropped).
"""

import json
import time
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Optional


def _json_safe(obj):
    """
    Convert common scientific types to JSON-serializable Python types.

    Values that cannot be converted fall back to their repr.
    """
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj
    if isinstance(obj, Enum):
        return obj.value

    # Containers
    if isinstance(obj, (list, tuple)):
        return [_json_safe(x) for x in obj]
    if isinstance(obj, dict):
        return {str(k): _json_safe(v) for k, v in obj.items()}

    # NumPy arrays & scalars
    tolist = getattr(obj, "tolist", None)
    if callable(tolist):
        return tolist()

    return repr(obj)


class LoadStatus(Enum):
    OK = "ok"
    SOURCE_UNAVAILABLE = "source_unavailable"
    EMPTY_RESULT = "empty_result"


@dataclass
class LoadReport:
    """
    Outcome of one ingestion call.

    Attributes:
        name: Loader operation (e.g., "load_pointcloud_from_bag")
        status: Outcome class
        source: Path that was read
        records_seen: Records retrieved from the source
        records_used: Records that produced a frame / pose
        records_skipped: Records skipped (comments, short CSV lines)
        points_dropped: Points removed for non-finite fields
        metrics: Additional counts (e.g., total_points, scans)
        notes: Human-readable diagnostic
        timestamp: When the report was generated
    """
    name: str
    status: LoadStatus = LoadStatus.OK
    source: str = ""
    records_seen: int = 0
    records_used: int = 0
    records_skipped: int = 0
    points_dropped: int = 0
    metrics: dict = field(default_factory=dict)
    notes: Optional[str] = None
    timestamp: float = field(default_factory=time.time)

    @property
    def ok(self) -> bool:
        return self.status is LoadStatus.OK

    def to_dict(self) -> dict:
        return _json_safe(asdict(self))

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)

"""
ROS bag message source.

Reads ROS 1 (.bag) and ROS 2 (directory with metadata.yaml, .db3 or .mcap
storage) bags through the `rosbags` library; no ROS installation is needed.

The loader only needs two things from a container:
  - open by path, failing with a diagnosable BagOpenError if unreadable
  - iterate deserialized messages of the requested types in stored order
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Sequence, Tuple

from rosbags.highlevel import AnyReader, AnyReaderError
from rosbags.typesys import Stores, get_typestore

_logger = logging.getLogger(__name__)

# Used for rosbag2 files that do not embed their message definitions.
_DEFAULT_STORE = Stores.ROS2_HUMBLE

_ROSBAG2_STORAGE_SUFFIXES = (".db3", ".mcap")


class BagOpenError(RuntimeError):
    """The bag at `path` could not be opened or indexed."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"LOADING BAG FAILED: {path}: {reason}")
        self.path = path
        self.reason = reason


def resolve_bag_path(bag_path: str) -> str:
    """
    Resolve a readable bag location from either:
      - a ROS 1 .bag file
      - a rosbag2 directory (contains metadata.yaml)
      - a rosbag2 storage file (.db3 / .mcap) inside such a directory

    Returns:
      - path to hand to the reader, or "" if not found.
    """
    if os.path.isfile(bag_path):
        if bag_path.endswith(".bag"):
            return bag_path
        if bag_path.endswith(_ROSBAG2_STORAGE_SUFFIXES):
            parent = os.path.dirname(os.path.abspath(bag_path))
            if os.path.isfile(os.path.join(parent, "metadata.yaml")):
                return parent
        return ""
    if os.path.isdir(bag_path) and os.path.isfile(os.path.join(bag_path, "metadata.yaml")):
        return bag_path
    return ""


class BagSource:
    """Iterates deserialized messages of an open AnyReader."""

    def __init__(self, reader: AnyReader, path: str) -> None:
        self._reader = reader
        self.path = path

    def msgtypes(self) -> set[str]:
        return {c.msgtype for c in self._reader.connections}

    def messages(self, msgtypes: Sequence[str]) -> Iterator[Tuple[str, object]]:
        """Yield (msgtype, msg) for every message of the given types, in stored order."""
        wanted = set(msgtypes)
        connections = [c for c in self._reader.connections if c.msgtype in wanted]
        if not connections:
            _logger.warning(
                "Bag %s has no connections of type(s) %s (found: %s)",
                self.path,
                ", ".join(sorted(wanted)),
                ", ".join(sorted(self.msgtypes())) or "none",
            )
            return
        for connection, _, rawdata in self._reader.messages(connections=connections):
            yield connection.msgtype, self._reader.deserialize(rawdata, connection.msgtype)


@contextmanager
def open_bag(bag_path: str) -> Iterator[BagSource]:
    """
    Open `bag_path` for reading; the reader is closed on every exit path.

    Raises:
        BagOpenError: path does not resolve to a bag, or the reader fails to open it
    """
    resolved = resolve_bag_path(bag_path)
    if not resolved:
        raise BagOpenError(bag_path, "no .bag file or rosbag2 directory found")

    try:
        reader = AnyReader([Path(resolved)], default_typestore=get_typestore(_DEFAULT_STORE))
        reader.open()
    except (AnyReaderError, OSError) as exc:
        raise BagOpenError(bag_path, str(exc)) from exc

    _logger.debug("Opened bag %s (%d connections)", resolved, len(reader.connections))
    try:
        yield BagSource(reader, resolved)
    finally:
        reader.close()

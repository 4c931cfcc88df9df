"""Checkpoint capture, restore, history and diff."""

from .diff import count_diff_lines, diff_snapshots
from .manager import CheckpointManager
from .store import CheckpointStore, InMemoryCheckpointStore

__all__ = [
    "CheckpointManager",
    "CheckpointStore",
    "InMemoryCheckpointStore",
    "count_diff_lines",
    "diff_snapshots",
]

"""Action queue with per-item lifecycle state."""

from .action_queue import ActionQueue

__all__ = ["ActionQueue"]

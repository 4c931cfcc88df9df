"""Checkpoint history contract and the in-memory implementation.

``CheckpointManager`` depends on the ``CheckpointStore`` Protocol instead of a
concrete persistence layer.

Contract guidelines
-------------------

- History is append-only per session; ``latest`` is the current tip.
- Checkpoints are immutable; stores hand them back as stored.
- Deleting an unknown id is a no-op.
"""

from __future__ import annotations

import threading
from typing import Dict, List, Optional, Protocol

from ..schemas.domain import Checkpoint


class CheckpointStore(Protocol):
    """Append-only per-session checkpoint history."""

    def append(self, checkpoint: Checkpoint) -> None:
        """
        Append a checkpoint to its session's history.

        Args:
            checkpoint: The checkpoint to store.
        """
        ...

    def get(self, checkpoint_id: str) -> Optional[Checkpoint]:
        """
        Retrieve a checkpoint by id.

        Returns:
            The checkpoint if found, else None.
        """
        ...

    def list(self, session_id: str) -> List[Checkpoint]:
        """
        List a session's checkpoints, oldest first.

        Args:
            session_id: The session identifier.
        """
        ...

    def delete(self, checkpoint_id: str) -> None:
        """Remove one checkpoint."""
        ...

    def drop_session(self, session_id: str) -> int:
        """Remove a session's whole history and return how many were dropped."""
        ...


class InMemoryCheckpointStore:
    """Process-local checkpoint history guarded by a lock."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_session: Dict[str, List[Checkpoint]] = {}
        self._by_id: Dict[str, Checkpoint] = {}

    def append(self, checkpoint: Checkpoint) -> None:
        with self._lock:
            self._by_session.setdefault(checkpoint.session_id, []).append(checkpoint)
            self._by_id[checkpoint.id] = checkpoint

    def get(self, checkpoint_id: str) -> Optional[Checkpoint]:
        with self._lock:
            return self._by_id.get(checkpoint_id)

    def list(self, session_id: str) -> List[Checkpoint]:
        with self._lock:
            return list(self._by_session.get(session_id, []))

    def delete(self, checkpoint_id: str) -> None:
        with self._lock:
            checkpoint = self._by_id.pop(checkpoint_id, None)
            if checkpoint is None:
                return
            history = self._by_session.get(checkpoint.session_id, [])
            self._by_session[checkpoint.session_id] = [c for c in history if c.id != checkpoint_id]

    def drop_session(self, session_id: str) -> int:
        with self._lock:
            history = self._by_session.pop(session_id, [])
            for checkpoint in history:
                self._by_id.pop(checkpoint.id, None)
            return len(history)

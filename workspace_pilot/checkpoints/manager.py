"""Checkpoint capture and restore.

A checkpoint is an immutable snapshot of workspace file state, captured by the
caller immediately before a batch of file edits is committed. Restoring hands
the snapshot back for the caller to re-apply as the live state.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from ..core.errors import CheckpointNotFoundError
from ..core.logging_config import get_logger
from ..schemas.domain import Checkpoint, FileDiff, FileRecord
from .diff import diff_snapshots
from .store import CheckpointStore, InMemoryCheckpointStore

logger = get_logger(__name__)


class CheckpointManager:
    """Snapshot and restore file collections, keeping a per-session history.

    The manager never decides when to snapshot; that belongs to the caller.
    """

    def __init__(self, store: Optional[CheckpointStore] = None) -> None:
        self._store: CheckpointStore = store if store is not None else InMemoryCheckpointStore()

    def capture(
        self,
        session_id: str,
        description: str,
        files: Iterable[FileRecord],
        *,
        message_id: Optional[str] = None,
        absent_paths: Iterable[str] = (),
    ) -> Checkpoint:
        """Deep-copy ``files`` into a new checkpoint and append it to the session history.

        Args:
            session_id: Owning session.
            description: Human-readable label, e.g. "Before applying 3 edits".
            files: The live file collection; later mutation of these records
                does not affect the checkpoint.
            message_id: Optional id of the assistant message that proposed the batch.
            absent_paths: Targeted paths that do not exist yet.
        """
        checkpoint = Checkpoint(
            session_id=session_id,
            message_id=message_id,
            description=description,
            files=tuple(f.model_copy(deep=True) for f in files),
            absent_paths=tuple(absent_paths),
        )
        self._store.append(checkpoint)
        logger.info(
            f"Captured checkpoint {checkpoint.id} for session {session_id} "
            f"({len(checkpoint.files)} files, {len(checkpoint.absent_paths)} absent)"
        )
        return checkpoint

    def restore(self, checkpoint: Checkpoint | str) -> List[FileRecord]:
        """Return a fresh copy of the snapshotted files.

        Raises:
            CheckpointNotFoundError: if given an id that is not in the history.
        """
        if isinstance(checkpoint, str):
            checkpoint = self.get(checkpoint)
        logger.info(f"Restoring checkpoint {checkpoint.id} ({len(checkpoint.files)} files)")
        return [f.model_copy(deep=True) for f in checkpoint.files]

    def get(self, checkpoint_id: str) -> Checkpoint:
        checkpoint = self._store.get(checkpoint_id)
        if checkpoint is None:
            raise CheckpointNotFoundError(checkpoint_id)
        return checkpoint

    def history(self, session_id: str) -> List[Checkpoint]:
        """Session checkpoints, oldest first."""
        return self._store.list(session_id)

    def latest(self, session_id: str) -> Optional[Checkpoint]:
        history = self._store.list(session_id)
        return history[-1] if history else None

    def delete(self, checkpoint_id: str) -> None:
        self._store.delete(checkpoint_id)

    def drop_session(self, session_id: str) -> int:
        return self._store.drop_session(session_id)

    def diff(self, checkpoint: Checkpoint | str, previous: Checkpoint | str | None = None) -> List[FileDiff]:
        """Compare a checkpoint with an earlier one (or with nothing)."""
        if isinstance(checkpoint, str):
            checkpoint = self.get(checkpoint)
        if isinstance(previous, str):
            previous = self.get(previous)
        return diff_snapshots(checkpoint.files, previous.files if previous is not None else ())

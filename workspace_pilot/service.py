"""High-level orchestration service for assistant actions.

``ActionService`` ties extraction, the action queue, checkpoints and the batch
executor together behind an application-friendly API.

Workflow
--------

- ``apply_text``:

  1. Extracts every action from the assistant text.
  2. Enqueues the executable ones.
  3. When the pending batch edits files, whether they come from this text or
     were already queued, captures a checkpoint of those files' current
     content before anything runs.
  4. Processes the pending batch and returns the outcome.

- ``rollback``:

  1. Restores the checkpoint snapshot.
  2. Writes every snapshotted file back and removes files that did not exist
     when the checkpoint was taken.

``ActionService`` is intentionally thin: it delegates execution semantics to
the executor and snapshot semantics to the checkpoint manager.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .checkpoints.manager import CheckpointManager
from .collaborators.base import WorkspaceCollaborator
from .core.errors import CollaboratorError
from .core.logging_config import get_logger
from .extraction.extractor import ActionExtractor
from .queueing.action_queue import ActionQueue
from .runtime.executor import BatchExecutor
from .runtime.models import CancellationToken
from .schemas.domain import ActionBatch, BatchResult, Checkpoint, FileEdit, FileRecord

logger = get_logger(__name__)


@dataclass(frozen=True)
class ApplyOutcome:
    """What ``ActionService.apply_text`` did with one piece of assistant text.

    ``checkpoint`` is set only when the batch contained file edits.
    """

    batch: ActionBatch
    result: BatchResult
    checkpoint: Optional[Checkpoint] = None


class ActionService:
    """Extract, checkpoint and execute the actions proposed in assistant text."""

    def __init__(
        self,
        collaborator: WorkspaceCollaborator,
        *,
        queue: ActionQueue | None = None,
        checkpoints: CheckpointManager | None = None,
        executor: BatchExecutor | None = None,
        extractor: ActionExtractor | None = None,
    ) -> None:
        self._collaborator = collaborator
        self.queue = queue if queue is not None else ActionQueue()
        self.checkpoints = checkpoints if checkpoints is not None else CheckpointManager()
        self._executor = executor if executor is not None else BatchExecutor(collaborator)
        self._extractor = extractor if extractor is not None else ActionExtractor()

    def extract(self, text: str) -> ActionBatch:
        return self._extractor.extract(text)

    async def apply_text(
        self,
        session_id: str,
        text: str,
        *,
        description: str | None = None,
        message_id: str | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> ApplyOutcome:
        """Extract and execute the actions in ``text``.

        Anything already pending in the queue runs in the same batch, after
        the entries enqueued earlier.

        Raises:
            CollaboratorError: If a file that is about to be edited cannot be
                read for the checkpoint for any reason other than not
                existing. Nothing has been executed at that point.
        """
        batch = self.extract(text)
        ids = self.queue.enqueue_batch(batch)
        logger.info(f"Session {session_id}: extracted {batch.total} actions, {len(ids)} executable")

        edits = [item.action for item in self.queue.pending() if isinstance(item.action, FileEdit)]
        checkpoint: Optional[Checkpoint] = None
        if edits:
            checkpoint = await self._capture(
                session_id,
                edits,
                description=description or batch.action_summary or f"Before {len(edits)} file edits",
                message_id=message_id,
            )

        result = await self._executor.process_batch(self.queue, cancel_token=cancel_token)
        return ApplyOutcome(batch=batch, result=result, checkpoint=checkpoint)

    async def rollback(self, checkpoint: Checkpoint | str) -> BatchResult:
        """Put the workspace files back to the state recorded in ``checkpoint``.

        The restore runs on a private queue so it never mixes with pending
        user actions; the outcome is reported like any other batch.
        """
        if isinstance(checkpoint, str):
            checkpoint = self.checkpoints.get(checkpoint)
        files = self.checkpoints.restore(checkpoint)

        restore_queue = ActionQueue()
        for record in files:
            restore_queue.enqueue(FileEdit.create(record.path, record.content))
        for path in checkpoint.absent_paths:
            current = await self._collaborator.read_file(path)
            if not current.not_found:
                restore_queue.enqueue(FileEdit.delete(path))

        logger.info(f"Rolling back to checkpoint {checkpoint.id} ({len(restore_queue)} file operations)")
        return await self._executor.process_batch(restore_queue)

    def history(self, session_id: str) -> List[Checkpoint]:
        return self.checkpoints.history(session_id)

    async def _capture(
        self,
        session_id: str,
        edits: List[FileEdit],
        *,
        description: str,
        message_id: str | None,
    ) -> Checkpoint:
        files, absent = await self._read_targets(edits)
        return self.checkpoints.capture(
            session_id,
            description,
            files,
            message_id=message_id,
            absent_paths=absent,
        )

    async def _read_targets(self, edits: List[FileEdit]) -> Tuple[List[FileRecord], List[str]]:
        files: List[FileRecord] = []
        absent: List[str] = []
        seen = set()
        for edit in edits:
            if edit.file in seen:
                continue
            seen.add(edit.file)
            current = await self._collaborator.read_file(edit.file)
            if current.success and current.content is not None:
                files.append(FileRecord(path=edit.file, content=current.content))
            elif current.not_found:
                absent.append(edit.file)
            else:
                raise CollaboratorError(
                    f"Cannot snapshot {edit.file} before editing it",
                    details=current.error,
                )
        return files, absent

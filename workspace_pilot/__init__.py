"""Turn assistant replies into applied workspace changes.

This package contains everything between an assistant's free-form reply and
the workspace it talks about.

Design overview
---------------

- Extraction recovers structured actions from tagged text. It never raises:
  malformed or incomplete tags are skipped.
- Queued actions follow a strict lifecycle
  (``pending -> in_progress -> completed | failed | cancelled``) and terminal
  states are final.
- ``runtime.BatchExecutor`` drains the pending actions one at a time through a
  LangGraph state machine. A failing action never stops the batch.
- Before a batch edits files, a checkpoint of those files is captured so the
  whole batch can be rolled back as a unit.
- Side effects go through a ``WorkspaceCollaborator``: a local directory or
  the host application's REST API.

Typical usage
-------------

Most applications should use ``factory.build_service`` and then
``ActionService.apply_text``:

1. Extract the actions from the assistant text.
2. Enqueue the executable ones and checkpoint the files they touch.
3. Execute the batch and report its ``BatchResult``.
4. Roll back with ``ActionService.rollback`` if the user rejects the result.
"""

from .checkpoints import CheckpointManager
from .extraction import ActionExtractor, extract
from .factory import build_service
from .queueing import ActionQueue
from .runtime import BatchExecutor, CancellationToken
from .service import ActionService, ApplyOutcome

__all__ = [
    "ActionExtractor",
    "ActionQueue",
    "ActionService",
    "ApplyOutcome",
    "BatchExecutor",
    "CancellationToken",
    "CheckpointManager",
    "build_service",
    "extract",
]

"""Error types raised by workspace-pilot.

Purpose:
- Provide typed exceptions for collaborator transports and checkpoint lookups.
- Expose transport-oriented context (e.g., status code, error body) for diagnosis.

Usage:
- The batch executor converts any of these into a per-action failure; they never
  abort a batch.
- Catch ``WorkspacePilotError`` for general failures.
"""

from __future__ import annotations

from typing import Any, Optional


class WorkspacePilotError(Exception):
    """Base error for workspace-pilot failures."""


class WorkspaceViolation(WorkspacePilotError, ValueError):
    """Raised when a path resolves outside the workspace root."""


class CollaboratorError(WorkspacePilotError):
    """A collaborator call could not be completed.

    Args:
        message: Human-readable error description.
        status_code: Optional HTTP-like status code associated with the failure.
        details: Optional structured payload from the collaborator (e.g., JSON body).
    """

    def __init__(self, message: str, *, status_code: Optional[int] = None, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class CheckpointNotFoundError(WorkspacePilotError, KeyError):
    """Raised when a checkpoint id is unknown.

    Args:
        checkpoint_id: The checkpoint identifier that was not found.
    """

    def __init__(self, checkpoint_id: str) -> None:
        super().__init__(f"Checkpoint not found: {checkpoint_id}")
        self.checkpoint_id = checkpoint_id

    def __str__(self) -> str:
        return str(self.args[0])

"""Pydantic models shared by extraction, queueing, checkpoints and execution."""

from .base import BaseSchema
from .domain import (
    EXECUTABLE_KINDS,
    TERMINAL_STATUSES,
    Action,
    ActionBatch,
    ActionKind,
    ActionStatus,
    BatchItemResult,
    BatchResult,
    ChangeType,
    Checkpoint,
    DeploymentConfiguration,
    FileDiff,
    FileEdit,
    FileRecord,
    PackageInstall,
    QueuedAction,
    RagSourceReference,
    ShellCommand,
    WorkflowConfiguration,
    WorkflowMode,
    WorkspaceToolNudge,
    action_from_payload,
    count_lines,
)

__all__ = [
    "BaseSchema",
    "EXECUTABLE_KINDS",
    "TERMINAL_STATUSES",
    "Action",
    "ActionBatch",
    "ActionKind",
    "ActionStatus",
    "BatchItemResult",
    "BatchResult",
    "ChangeType",
    "Checkpoint",
    "DeploymentConfiguration",
    "FileDiff",
    "FileEdit",
    "FileRecord",
    "PackageInstall",
    "QueuedAction",
    "RagSourceReference",
    "ShellCommand",
    "WorkflowConfiguration",
    "WorkflowMode",
    "WorkspaceToolNudge",
    "action_from_payload",
    "count_lines",
]

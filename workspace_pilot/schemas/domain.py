from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Dict, Iterator, List, Literal, Mapping, Optional, Tuple, Union
from uuid import uuid4

from pydantic import ConfigDict, Field, TypeAdapter, model_validator

from .base import BaseSchema


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _new_action_id() -> str:
    return f"action-{uuid4().hex}"


def count_lines(content: Optional[str]) -> int:
    """Number of newline-delimited lines in ``content`` (0 when absent)."""
    if content is None:
        return 0
    return len(content.split("\n"))


class ActionKind(str, Enum):
    file_edit = "file_edit"
    shell_command = "shell_command"
    package_install = "package_install"
    workspace_tool_nudge = "workspace_tool_nudge"
    workflow_configuration = "workflow_configuration"
    deployment_configuration = "deployment_configuration"
    rag_source_reference = "rag_source_reference"


EXECUTABLE_KINDS = frozenset(
    {
        ActionKind.file_edit,
        ActionKind.shell_command,
        ActionKind.package_install,
        ActionKind.workflow_configuration,
        ActionKind.deployment_configuration,
    }
)


class ChangeType(str, Enum):
    edit = "edit"
    create = "create"
    delete = "delete"


class WorkflowMode(str, Enum):
    sequential = "sequential"
    parallel = "parallel"


class ActionStatus(str, Enum):
    pending = "pending"
    in_progress = "in_progress"
    completed = "completed"
    failed = "failed"
    cancelled = "cancelled"


TERMINAL_STATUSES = frozenset({ActionStatus.completed, ActionStatus.failed, ActionStatus.cancelled})


# =====================================================================
# Actions
# =====================================================================


class FileEdit(BaseSchema):
    """A proposed change to one workspace file.

    ``added``/``removed`` are always derived from the content fields, whatever
    the caller passes.
    """

    kind: Literal["file_edit"] = "file_edit"
    file: str = Field(..., min_length=1)
    change_type: ChangeType
    old_content: Optional[str] = None
    new_content: Optional[str] = None
    added: int = 0
    removed: int = 0

    @model_validator(mode="after")
    def _check_content_and_derive_counts(self) -> "FileEdit":
        if self.change_type == ChangeType.edit:
            if self.old_content is None or self.new_content is None:
                raise ValueError("edit requires both old_content and new_content")
        elif self.change_type == ChangeType.create:
            if self.new_content is None or self.old_content is not None:
                raise ValueError("create requires new_content only")
        elif self.old_content is not None or self.new_content is not None:
            raise ValueError("delete carries no content")
        self.added = count_lines(self.new_content)
        self.removed = count_lines(self.old_content)
        return self

    @classmethod
    def edit(cls, file: str, old_content: str, new_content: str) -> "FileEdit":
        return cls(file=file, change_type=ChangeType.edit, old_content=old_content, new_content=new_content)

    @classmethod
    def create(cls, file: str, new_content: str) -> "FileEdit":
        return cls(file=file, change_type=ChangeType.create, new_content=new_content)

    @classmethod
    def delete(cls, file: str) -> "FileEdit":
        return cls(file=file, change_type=ChangeType.delete)


class ShellCommand(BaseSchema):
    kind: Literal["shell_command"] = "shell_command"
    command: str = Field(..., min_length=1)
    working_directory: Optional[str] = None
    is_dangerous: bool = False


class PackageInstall(BaseSchema):
    kind: Literal["package_install"] = "package_install"
    language: str = Field(..., min_length=1)
    packages: List[str] = Field(..., min_length=1)


class WorkflowConfiguration(BaseSchema):
    kind: Literal["workflow_configuration"] = "workflow_configuration"
    workflow_name: str = Field(..., min_length=1)
    commands: List[str] = Field(default_factory=list)
    mode: WorkflowMode = WorkflowMode.sequential
    set_run_button: bool = False


class DeploymentConfiguration(BaseSchema):
    kind: Literal["deployment_configuration"] = "deployment_configuration"
    build_command: Optional[str] = None
    run_command: str = Field(..., min_length=1)


class WorkspaceToolNudge(BaseSchema):
    kind: Literal["workspace_tool_nudge"] = "workspace_tool_nudge"
    tool_name: str
    reason: str


class RagSourceReference(BaseSchema):
    kind: Literal["rag_source_reference"] = "rag_source_reference"
    id: str
    path: str


Action = Annotated[
    Union[
        FileEdit,
        ShellCommand,
        PackageInstall,
        WorkflowConfiguration,
        DeploymentConfiguration,
        WorkspaceToolNudge,
        RagSourceReference,
    ],
    Field(discriminator="kind"),
]

_ACTION_ADAPTER: TypeAdapter[Any] = TypeAdapter(Action)


def action_from_payload(kind: ActionKind | str, payload: Mapping[str, Any]) -> Action:
    """Validate a raw payload into the action model for ``kind``.

    Raises:
        pydantic.ValidationError: if the payload does not satisfy the model.
    """
    data: Dict[str, Any] = dict(payload)
    data["kind"] = ActionKind(kind).value
    return _ACTION_ADAPTER.validate_python(data)


class ActionBatch(BaseSchema):
    """All actions recovered from one extraction pass, grouped per kind."""

    file_edits: List[FileEdit] = Field(default_factory=list)
    shell_commands: List[ShellCommand] = Field(default_factory=list)
    package_installs: List[PackageInstall] = Field(default_factory=list)
    workspace_tool_nudges: List[WorkspaceToolNudge] = Field(default_factory=list)
    workflow_configurations: List[WorkflowConfiguration] = Field(default_factory=list)
    deployment_configurations: List[DeploymentConfiguration] = Field(default_factory=list)
    rag_sources: List[RagSourceReference] = Field(default_factory=list)
    action_summary: Optional[str] = None

    def actions(self) -> Iterator[Action]:
        """Yield every action in canonical kind order."""
        yield from self.file_edits
        yield from self.shell_commands
        yield from self.package_installs
        yield from self.workspace_tool_nudges
        yield from self.workflow_configurations
        yield from self.deployment_configurations
        yield from self.rag_sources

    def executable(self) -> Iterator[Action]:
        """Yield only the actions the batch executor can dispatch."""
        for action in self.actions():
            if ActionKind(action.kind) in EXECUTABLE_KINDS:
                yield action

    @property
    def total(self) -> int:
        return sum(1 for _ in self.actions())

    def is_empty(self) -> bool:
        return self.total == 0


# =====================================================================
# Queue, checkpoints and results
# =====================================================================


class QueuedAction(BaseSchema):
    id: str = Field(default_factory=_new_action_id)
    action: Action
    status: ActionStatus = ActionStatus.pending
    error: Optional[str] = None
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)

    @property
    def kind(self) -> ActionKind:
        return ActionKind(self.action.kind)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class FileRecord(BaseSchema):
    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)

    path: str
    content: str
    language: Optional[str] = None
    size: Optional[int] = None

    @model_validator(mode="before")
    @classmethod
    def _derive_size(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("size") is None and isinstance(data.get("content"), str):
            data = {**data, "size": len(data["content"].encode("utf-8"))}
        return data


class Checkpoint(BaseSchema):
    """Immutable snapshot of file state taken before a batch of edits.

    ``absent_paths`` lists files that were targeted by the batch but did not
    exist at capture time, so a rollback can remove them again.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    session_id: str
    message_id: Optional[str] = None
    description: str = ""
    files: Tuple[FileRecord, ...] = ()
    absent_paths: Tuple[str, ...] = ()
    created_at: datetime = Field(default_factory=_utc_now)


class FileDiff(BaseSchema):
    path: str
    type: Literal["added", "modified", "deleted"]
    old_content: Optional[str] = None
    new_content: Optional[str] = None
    additions: int = 0
    deletions: int = 0


class BatchItemResult(BaseSchema):
    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)

    id: str
    success: bool
    status: ActionStatus
    error: Optional[str] = None


class BatchResult(BaseSchema):
    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)

    total: int = 0
    completed: int = 0
    failed: int = 0
    cancelled: int = 0
    results: Tuple[BatchItemResult, ...] = ()

    @classmethod
    def from_results(cls, results: List[BatchItemResult]) -> "BatchResult":
        return cls(
            total=len(results),
            completed=sum(1 for r in results if r.status == ActionStatus.completed),
            failed=sum(1 for r in results if r.status == ActionStatus.failed),
            cancelled=sum(1 for r in results if r.status == ActionStatus.cancelled),
            results=tuple(results),
        )

    @property
    def ok(self) -> bool:
        return self.completed == self.total

    def summary(self) -> str:
        """User-facing one-line report, e.g. ``"2 succeeded, 1 failed"``."""
        if self.total == 0:
            return "Nothing to apply"
        if self.ok:
            return f"All {self.total} actions applied"
        text = f"{self.completed} succeeded, {self.failed} failed"
        if self.cancelled:
            text += f", {self.cancelled} cancelled"
        return text

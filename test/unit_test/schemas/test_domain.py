from __future__ import annotations

import pytest
from pydantic import ValidationError

from workspace_pilot.schemas.domain import (
    ActionBatch,
    ActionKind,
    ActionStatus,
    BatchItemResult,
    BatchResult,
    ChangeType,
    Checkpoint,
    FileEdit,
    FileRecord,
    PackageInstall,
    QueuedAction,
    RagSourceReference,
    ShellCommand,
    WorkspaceToolNudge,
    action_from_payload,
    count_lines,
)


class TestFileEdit:
    def test_counts_are_derived(self):
        edit = FileEdit.edit("a.py", "a\nb", "a\nb\nc")
        assert (edit.added, edit.removed) == (3, 2)

    def test_caller_supplied_counts_are_overridden(self):
        edit = FileEdit(file="a.py", change_type=ChangeType.create, new_content="x", added=99, removed=7)
        assert (edit.added, edit.removed) == (1, 0)

    def test_delete_counts_are_zero(self):
        edit = FileEdit.delete("old.txt")
        assert (edit.added, edit.removed) == (0, 0)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"change_type": "edit", "old_content": "a"},
            {"change_type": "edit", "new_content": "b"},
            {"change_type": "create"},
            {"change_type": "create", "old_content": "a", "new_content": "b"},
            {"change_type": "delete", "new_content": "b"},
        ],
    )
    def test_content_invariants(self, kwargs):
        with pytest.raises(ValidationError):
            FileEdit(file="a.py", **kwargs)


def test_count_lines():
    assert count_lines(None) == 0
    assert count_lines("") == 1
    assert count_lines("one") == 1
    assert count_lines("one\ntwo\n") == 3


def test_action_from_payload_uses_kind():
    action = action_from_payload(ActionKind.shell_command, {"command": "ls"})
    assert isinstance(action, ShellCommand)
    assert action.command == "ls"

    with pytest.raises(ValidationError):
        action_from_payload("package_install", {"language": "python", "packages": []})


def test_batch_executable_skips_informational_kinds():
    batch = ActionBatch(
        file_edits=[FileEdit.create("a.txt", "a")],
        shell_commands=[ShellCommand(command="ls")],
        package_installs=[PackageInstall(language="python", packages=["httpx"])],
        workspace_tool_nudges=[WorkspaceToolNudge(tool_name="db", reason="r")],
        rag_sources=[RagSourceReference(id="1", path="p")],
    )

    assert batch.total == 5
    assert [a.kind for a in batch.executable()] == ["file_edit", "shell_command", "package_install"]


def test_queued_action_defaults():
    item = QueuedAction(action=ShellCommand(command="ls"))
    assert item.id.startswith("action-")
    assert item.status == ActionStatus.pending
    assert item.kind == ActionKind.shell_command
    assert not item.is_terminal
    assert QueuedAction(action=ShellCommand(command="ls")).id != item.id


def test_file_record_size_is_derived_from_utf8():
    assert FileRecord(path="a", content="héllo").size == 6


def test_checkpoint_is_frozen():
    checkpoint = Checkpoint(session_id="s1", files=(FileRecord(path="a", content="x"),))
    with pytest.raises(ValidationError):
        checkpoint.description = "changed"
    with pytest.raises(ValidationError):
        checkpoint.files[0].content = "changed"
    assert checkpoint.files[0].content == "x"


class TestBatchResult:
    def test_from_results_counts(self):
        result = BatchResult.from_results(
            [
                BatchItemResult(id="1", success=True, status=ActionStatus.completed),
                BatchItemResult(id="2", success=False, status=ActionStatus.failed, error="boom"),
                BatchItemResult(id="3", success=False, status=ActionStatus.cancelled, error="Batch cancelled"),
            ]
        )
        assert (result.total, result.completed, result.failed, result.cancelled) == (3, 1, 1, 1)
        assert not result.ok
        assert result.summary() == "1 succeeded, 1 failed, 1 cancelled"

    def test_summary_variants(self):
        assert BatchResult().summary() == "Nothing to apply"
        done = BatchResult.from_results([BatchItemResult(id="1", success=True, status=ActionStatus.completed)])
        assert done.summary() == "All 1 actions applied"
        assert done.ok

from __future__ import annotations

from pathlib import Path

import pytest

from test.unit_test.fakes import FakeCollaborator
from workspace_pilot.collaborators import LocalWorkspaceCollaborator
from workspace_pilot.core.errors import CollaboratorError
from workspace_pilot.queueing import ActionQueue
from workspace_pilot.runtime import CancellationToken
from workspace_pilot.schemas.domain import ActionStatus, FileEdit, ShellCommand
from workspace_pilot.service import ActionService

REPLY = (
    '<proposed_actions summary="Rename greeting and add docs" />'
    '<proposed_file_replace_substring file_path="app.py">'
    "<old_str>hello</old_str><new_str>goodbye</new_str>"
    "</proposed_file_replace_substring>"
    '<proposed_file_insert file_path="docs/README.md"># Docs</proposed_file_insert>'
    "<proposed_shell_command>pytest</proposed_shell_command>"
    '<proposed_workspace_tool_nudge tool_name="db" reason="persist" />'
)


@pytest.mark.asyncio
async def test_apply_text_checkpoints_then_executes():
    collab = FakeCollaborator({"app.py": "print('hello')"})
    service = ActionService(collab)

    outcome = await service.apply_text("s1", REPLY, message_id="m1")

    assert outcome.batch.total == 4
    assert outcome.result.total == 3
    assert outcome.result.ok
    assert collab.files == {"app.py": "print('goodbye')", "docs/README.md": "# Docs"}

    checkpoint = outcome.checkpoint
    assert checkpoint is not None
    assert checkpoint.message_id == "m1"
    assert checkpoint.description == "Rename greeting and add docs"
    assert [(f.path, f.content) for f in checkpoint.files] == [("app.py", "print('hello')")]
    assert checkpoint.absent_paths == ("docs/README.md",)
    assert service.history("s1") == [checkpoint]

    # Snapshot reads happen before any action runs.
    assert collab.calls[:2] == [("read_file", "app.py"), ("read_file", "docs/README.md")]


@pytest.mark.asyncio
async def test_no_checkpoint_without_file_edits():
    service = ActionService(FakeCollaborator())

    outcome = await service.apply_text("s1", "<proposed_shell_command>ls</proposed_shell_command>")

    assert outcome.checkpoint is None
    assert outcome.result.completed == 1
    assert service.history("s1") == []


@pytest.mark.asyncio
async def test_explicit_description_wins():
    service = ActionService(FakeCollaborator())
    outcome = await service.apply_text(
        "s1", '<proposed_file_insert file_path="a">a</proposed_file_insert>', description="Before step 2"
    )
    assert outcome.checkpoint.description == "Before step 2"


@pytest.mark.asyncio
async def test_previously_pending_actions_run_first():
    collab = FakeCollaborator()
    queue = ActionQueue()
    earlier = queue.enqueue(ShellCommand(command="earlier"))
    service = ActionService(collab, queue=queue)

    outcome = await service.apply_text("s1", "<proposed_shell_command>later</proposed_shell_command>")

    assert outcome.result.results[0].id == earlier
    assert [c[1] for c in collab.calls] == ["earlier", "later"]
    assert queue.get(earlier).status == ActionStatus.completed


@pytest.mark.asyncio
async def test_apply_text_with_cancelled_token():
    collab = FakeCollaborator({"a.txt": "x"})
    service = ActionService(collab)
    token = CancellationToken()
    token.cancel()

    outcome = await service.apply_text(
        "s1", '<proposed_file_replace file_path="a.txt">y</proposed_file_replace>', cancel_token=token
    )

    assert outcome.result.cancelled == 1
    assert collab.files["a.txt"] == "x"
    assert outcome.checkpoint is not None


@pytest.mark.asyncio
async def test_rollback_restores_files_and_removes_created_ones():
    collab = FakeCollaborator({"app.py": "print('hello')"})
    service = ActionService(collab)
    outcome = await service.apply_text("s1", REPLY)

    collab.calls.clear()
    result = await service.rollback(outcome.checkpoint.id)

    assert result.ok
    assert result.total == 2
    assert collab.files == {"app.py": "print('hello')"}
    assert len(service.queue) == 3


@pytest.mark.asyncio
async def test_rollback_skips_absent_files_that_were_never_created():
    collab = FakeCollaborator()
    service = ActionService(collab)
    checkpoint = service.checkpoints.capture("s1", "cp", [], absent_paths=["ghost.txt"])

    result = await service.rollback(checkpoint)

    assert result.total == 0
    assert ("delete_file", "ghost.txt") not in collab.calls


@pytest.mark.asyncio
async def test_checkpoint_covers_edits_already_pending():
    collab = FakeCollaborator({"a.txt": "orig-a", "b.txt": "orig-b"})
    queue = ActionQueue()
    queue.enqueue(FileEdit.create("a.txt", "NEW-A"))
    service = ActionService(collab, queue=queue)

    outcome = await service.apply_text("s1", '<proposed_file_replace file_path="b.txt">NEW-B</proposed_file_replace>')

    assert outcome.result.total == 2
    assert [f.path for f in outcome.checkpoint.files] == ["a.txt", "b.txt"]
    assert outcome.checkpoint.description == "Before 2 file edits"

    await service.rollback(outcome.checkpoint)

    assert collab.files == {"a.txt": "orig-a", "b.txt": "orig-b"}


@pytest.mark.asyncio
async def test_pending_edits_are_checkpointed_when_text_has_none():
    collab = FakeCollaborator({"a.txt": "orig-a"})
    queue = ActionQueue()
    queue.enqueue(FileEdit.create("a.txt", "NEW-A"))
    service = ActionService(collab, queue=queue)

    outcome = await service.apply_text("s1", "<proposed_shell_command>ls</proposed_shell_command>")

    assert outcome.checkpoint is not None
    assert [(f.path, f.content) for f in outcome.checkpoint.files] == [("a.txt", "orig-a")]


@pytest.mark.asyncio
async def test_unreadable_target_aborts_before_anything_runs():
    collab = FakeCollaborator({"data.txt": "binary"})
    collab.unreadable.add("data.txt")
    service = ActionService(collab)

    with pytest.raises(CollaboratorError, match="data.txt"):
        await service.apply_text(
            "s1",
            '<proposed_file_replace file_path="data.txt">hello</proposed_file_replace>'
            "<proposed_shell_command>ls</proposed_shell_command>",
        )

    assert collab.files == {"data.txt": "binary"}
    assert [c[0] for c in collab.calls] == ["read_file"]
    assert service.queue.pending_count == 2
    assert service.history("s1") == []


@pytest.mark.asyncio
async def test_non_utf8_file_is_never_recorded_as_absent(workspace_root: Path):
    target = workspace_root / "data.txt"
    target.write_bytes(b"\xff\xfe\x00binary")
    service = ActionService(LocalWorkspaceCollaborator(workspace_root))

    with pytest.raises(CollaboratorError):
        await service.apply_text("s1", '<proposed_file_replace file_path="data.txt">hello</proposed_file_replace>')

    assert target.read_bytes() == b"\xff\xfe\x00binary"

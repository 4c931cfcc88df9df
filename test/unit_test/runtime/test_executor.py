from __future__ import annotations

from typing import List

import pytest

from test.unit_test.fakes import FakeCollaborator
from workspace_pilot.queueing import ActionQueue
from workspace_pilot.runtime import BatchExecutor, CancellationToken
from workspace_pilot.schemas.domain import (
    ActionStatus,
    DeploymentConfiguration,
    FileEdit,
    PackageInstall,
    RagSourceReference,
    ShellCommand,
    WorkflowConfiguration,
    WorkspaceToolNudge,
)

pytestmark = pytest.mark.asyncio


def _enqueue_commands(queue: ActionQueue, *commands: str) -> List[str]:
    return [queue.enqueue(ShellCommand(command=c)) for c in commands]


async def test_failure_is_isolated_and_later_actions_still_run():
    collab = FakeCollaborator()
    collab.failing_commands.add("b")
    queue = ActionQueue()
    ids = _enqueue_commands(queue, "a", "b", "c")

    result = await BatchExecutor(collab).process_batch(queue)

    assert (result.total, result.completed, result.failed) == (3, 2, 1)
    assert [c[1] for c in collab.calls] == ["a", "b", "c"]
    assert [queue.get(i).status for i in ids] == [
        ActionStatus.completed,
        ActionStatus.failed,
        ActionStatus.completed,
    ]
    assert queue.get(ids[1]).error == "b failed"
    assert all(queue.get(i).is_terminal for i in ids)
    assert [r.id for r in result.results] == ids
    assert result.summary() == "2 succeeded, 1 failed"


async def test_raised_exception_becomes_failure():
    collab = FakeCollaborator()
    collab.raising_commands.add("boom")
    queue = ActionQueue()
    ids = _enqueue_commands(queue, "boom", "ok")

    result = await BatchExecutor(collab).process_batch(queue)

    assert (result.completed, result.failed) == (1, 1)
    assert queue.get(ids[0]).error == "transport broke on boom"


async def test_empty_queue():
    result = await BatchExecutor(FakeCollaborator()).process_batch(ActionQueue())
    assert result.total == 0
    assert result.summary() == "Nothing to apply"


async def test_only_pending_entries_snapshotted_at_start_are_processed():
    collab = FakeCollaborator()
    queue = ActionQueue()
    done, waiting = _enqueue_commands(queue, "done", "waiting")
    queue.update_status(done, ActionStatus.completed)

    result = await BatchExecutor(collab).process_batch(queue)

    assert result.total == 1
    assert [r.id for r in result.results] == [waiting]
    assert collab.calls == [("execute_shell", "waiting", "")]


async def test_large_batch_is_not_limited_by_graph_recursion():
    collab = FakeCollaborator()
    queue = ActionQueue()
    _enqueue_commands(queue, *[f"echo {i}" for i in range(60)])

    result = await BatchExecutor(collab).process_batch(queue)

    assert result.completed == 60


class TestFileEdits:
    async def test_create_edit_delete(self):
        collab = FakeCollaborator({"app.py": "x = 1\nx = 1\n", "old.txt": "bye"})
        queue = ActionQueue()
        queue.enqueue(FileEdit.create("new.txt", "hello"))
        queue.enqueue(FileEdit.edit("app.py", "x = 1", "x = 2"))
        queue.enqueue(FileEdit.delete("old.txt"))

        result = await BatchExecutor(collab).process_batch(queue)

        assert result.ok
        assert collab.files == {"new.txt": "hello", "app.py": "x = 2\nx = 1\n"}

    async def test_edit_fails_without_writing_when_read_fails(self):
        collab = FakeCollaborator()
        queue = ActionQueue()
        action_id = queue.enqueue(FileEdit.edit("missing.py", "a", "b"))

        result = await BatchExecutor(collab).process_batch(queue)

        assert result.failed == 1
        assert queue.get(action_id).error == "File not found: missing.py"
        assert ("write_file", "missing.py") not in collab.calls

    async def test_missing_old_content_fails_when_strict(self):
        collab = FakeCollaborator({"a.py": "print(1)"})
        queue = ActionQueue()
        action_id = queue.enqueue(FileEdit.edit("a.py", "print(2)", "print(3)"))

        result = await BatchExecutor(collab).process_batch(queue)

        assert result.failed == 1
        assert queue.get(action_id).error == "Old content not found in a.py"
        assert collab.files["a.py"] == "print(1)"

    async def test_missing_old_content_writes_back_when_lenient(self):
        collab = FakeCollaborator({"a.py": "print(1)"})
        queue = ActionQueue()
        queue.enqueue(FileEdit.edit("a.py", "print(2)", "print(3)"))

        result = await BatchExecutor(collab, strict_substring=False).process_batch(queue)

        assert result.completed == 1
        assert collab.files["a.py"] == "print(1)"
        assert ("write_file", "a.py") in collab.calls


async def test_dispatch_for_every_executable_kind():
    collab = FakeCollaborator()
    queue = ActionQueue()
    queue.enqueue(ShellCommand(command="npm test", working_directory="web"))
    queue.enqueue(PackageInstall(language="nodejs", packages=["lodash", "axios"]))
    queue.enqueue(WorkflowConfiguration(workflow_name="Start", commands=["npm run dev"]))
    queue.enqueue(DeploymentConfiguration(run_command="npm start"))

    result = await BatchExecutor(collab).process_batch(queue)

    assert result.ok
    assert collab.calls == [
        ("execute_shell", "npm test", "web"),
        ("install_packages", "nodejs", "lodash,axios"),
        ("configure_workflow", "Start"),
        ("configure_deployment", "npm start"),
    ]


async def test_informational_kinds_fail():
    queue = ActionQueue()
    nudge = queue.enqueue(WorkspaceToolNudge(tool_name="db", reason="r"))
    rag = queue.enqueue(RagSourceReference(id="1", path="p"))

    result = await BatchExecutor(FakeCollaborator()).process_batch(queue)

    assert result.failed == 2
    assert queue.get(nudge).error == "Action kind 'workspace_tool_nudge' cannot be executed"
    assert queue.get(rag).error == "Action kind 'rag_source_reference' cannot be executed"


async def test_action_timeout_cancels_only_the_slow_action():
    collab = FakeCollaborator()
    collab.slow_commands["slow"] = 5
    queue = ActionQueue()
    slow, fast = _enqueue_commands(queue, "slow", "fast")

    result = await BatchExecutor(collab, action_timeout=0.05).process_batch(queue)

    assert (result.total, result.completed, result.cancelled, result.failed) == (2, 1, 1, 0)
    assert queue.get(slow).status == ActionStatus.cancelled
    assert queue.get(slow).error == "Timed out after 0.05s"
    assert queue.get(fast).status == ActionStatus.completed


class _CancellingCollaborator(FakeCollaborator):
    def __init__(self, token: CancellationToken, after: str) -> None:
        super().__init__()
        self._token = token
        self._after = after

    async def execute_shell(self, command, cwd=None):
        out = await super().execute_shell(command, cwd)
        if command == self._after:
            self._token.cancel()
        return out


async def test_cancellation_token_stops_remaining_actions():
    token = CancellationToken()
    collab = _CancellingCollaborator(token, after="first")
    queue = ActionQueue()
    first, second, third = _enqueue_commands(queue, "first", "second", "third")

    result = await BatchExecutor(collab).process_batch(queue, cancel_token=token)

    assert (result.total, result.completed, result.cancelled) == (3, 1, 2)
    assert [c[1] for c in collab.calls] == ["first"]
    assert queue.get(second).error == "Batch cancelled"
    assert queue.get(third).status == ActionStatus.cancelled
    assert result.summary() == "1 succeeded, 0 failed, 2 cancelled"


async def test_pre_cancelled_token_runs_nothing():
    token = CancellationToken()
    token.cancel()
    collab = FakeCollaborator()
    queue = ActionQueue()
    _enqueue_commands(queue, "a", "b")

    result = await BatchExecutor(collab).process_batch(queue, cancel_token=token)

    assert result.cancelled == 2
    assert collab.calls == []

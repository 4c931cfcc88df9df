"""LangGraph batch executor.

``BatchExecutor`` drains the pending entries of an ``ActionQueue`` and
performs each one through a ``WorkspaceCollaborator``.

Execution model
--------------

- The pending ids are snapshotted when ``process_batch`` is called; entries
  enqueued afterwards wait for the next batch.
- The executor runs a LangGraph state machine (``start -> execute -> finish``)
  over a mutable ``_GraphState``. Each iteration of ``execute`` runs exactly one
  action at index ``idx``, strictly one at a time in FIFO order.
- Every action moves ``pending -> in_progress -> completed | failed | cancelled``.
  A failure never stops the batch; the next action always runs.

Timeouts and cancellation
-------------------------

With ``action_timeout`` set, an action that does not finish in time becomes
``cancelled``. A tripped ``CancellationToken`` turns every action that has not
started yet into ``cancelled``.
"""

from __future__ import annotations

import asyncio
from typing import Optional, Tuple

from langgraph.graph import END, StateGraph

from ..collaborators.base import WorkspaceCollaborator
from ..collaborators.definitions import DeploymentConfigureInput, WorkflowConfigureInput
from ..core.logging_config import get_logger
from ..queueing.action_queue import ActionQueue
from ..schemas.domain import (
    Action,
    ActionStatus,
    BatchItemResult,
    BatchResult,
    ChangeType,
    DeploymentConfiguration,
    FileEdit,
    PackageInstall,
    ShellCommand,
    WorkflowConfiguration,
)
from .models import CancellationToken, _GraphState

logger = get_logger(__name__)

UNKNOWN_ERROR = "Unknown error"
BATCH_CANCELLED = "Batch cancelled"

# (success, error)
_Outcome = Tuple[bool, Optional[str]]


class BatchExecutor:
    """Execute queued actions against a collaborator and report the batch.

    The executor does no I/O of its own; everything side-effecting goes
    through the collaborator, and any exception it raises is recorded as the
    failure of that single action.
    """

    def __init__(
        self,
        collaborator: WorkspaceCollaborator,
        *,
        action_timeout: Optional[float] = None,
        strict_substring: bool = True,
    ) -> None:
        """
        Initialize the BatchExecutor.

        Args:
            collaborator: Performs the side effects of each action.
            action_timeout: Optional per-action limit in seconds.
            strict_substring: Fail substring edits whose old content is not in
                the current file instead of writing the file back unchanged.
        """
        self._collaborator = collaborator
        self._action_timeout = action_timeout
        self._strict_substring = strict_substring
        self._graph = self._build_graph()

    def _build_graph(self):
        """Build and compile the LangGraph state machine."""
        g: StateGraph = StateGraph(_GraphState)
        g.add_node("start", self._node_start)
        g.add_node("execute", self._node_execute_next)
        g.add_node("finish", self._node_finish)

        g.set_entry_point("start")
        g.add_edge("start", "execute")

        g.add_conditional_edges(
            "execute",
            self._route_after_execute,
            {
                "finish": "finish",
                "continue": "execute",
            },
        )
        g.add_edge("finish", END)
        return g.compile()

    async def process_batch(
        self,
        queue: ActionQueue,
        *,
        cancel_token: Optional[CancellationToken] = None,
    ) -> BatchResult:
        """Process every action that is pending right now.

        Args:
            queue: Queue whose pending entries are executed and updated in place.
            cancel_token: Optional token; once tripped, the remaining actions are
                marked ``cancelled`` without running.

        Returns:
            The aggregate ``BatchResult``; ``results`` follow execution order.
        """
        ids = [entry.id for entry in queue.pending()]
        logger.info(f"Processing batch of {len(ids)} actions")

        state: _GraphState = {
            "queue": queue,
            "ids": ids,
            "idx": 0,
            "results": [],
            "cancel_token": cancel_token,
        }
        final = await self._graph.ainvoke(state, config={"recursion_limit": len(ids) + 10})

        result = BatchResult.from_results(list(final["results"]))
        logger.info(f"Batch finished: {result.summary()}")
        return result

    async def _node_start(self, state: _GraphState) -> _GraphState:
        """Graph entry node. Currently a no-op."""
        return state

    async def _node_execute_next(self, state: _GraphState) -> _GraphState:
        """Run the action at ``idx`` and record its terminal status."""
        ids = state["ids"]
        idx = int(state.get("idx") or 0)
        if idx >= len(ids):
            state["_finished"] = True
            return state

        queue = state["queue"]
        action_id = ids[idx]
        token = state.get("cancel_token")

        if token is not None and token.cancelled:
            item = self._record(queue, action_id, ActionStatus.cancelled, BATCH_CANCELLED)
        else:
            item = await self._run_one(queue, action_id)

        state["results"].append(item)
        state["idx"] = idx + 1
        if state["idx"] >= len(ids):
            state["_finished"] = True
        return state

    async def _node_finish(self, state: _GraphState) -> _GraphState:
        """Finish node. Currently a no-op."""
        return state

    def _route_after_execute(self, state: _GraphState) -> str:
        """Route to finish/continue after executing an action."""
        if state.get("_finished"):
            return "finish"
        return "continue"

    async def _run_one(self, queue: ActionQueue, action_id: str) -> BatchItemResult:
        entry = queue.get(action_id)
        if entry is None:
            logger.warning(f"Action {action_id} left the queue before it could run")
            return BatchItemResult(
                id=action_id,
                success=False,
                status=ActionStatus.failed,
                error=f"Action {action_id} is no longer queued",
            )

        queue.update_status(action_id, ActionStatus.in_progress)
        logger.debug(f"Executing {entry.kind.value} action {action_id}")

        try:
            if self._action_timeout is not None:
                success, error = await asyncio.wait_for(self._dispatch(entry.action), timeout=self._action_timeout)
            else:
                success, error = await self._dispatch(entry.action)
        except asyncio.TimeoutError as e:
            if self._action_timeout is None:
                return self._record(queue, action_id, ActionStatus.failed, str(e) or UNKNOWN_ERROR)
            return self._record(
                queue, action_id, ActionStatus.cancelled, f"Timed out after {self._action_timeout:g}s"
            )
        except Exception as e:
            logger.exception(f"Action {action_id} raised")
            return self._record(queue, action_id, ActionStatus.failed, str(e) or UNKNOWN_ERROR)

        if success:
            return self._record(queue, action_id, ActionStatus.completed, None)
        return self._record(queue, action_id, ActionStatus.failed, error or UNKNOWN_ERROR)

    @staticmethod
    def _record(queue: ActionQueue, action_id: str, status: ActionStatus, error: Optional[str]) -> BatchItemResult:
        queue.update_status(action_id, status, error)
        if status == ActionStatus.completed:
            logger.info(f"Action {action_id} completed")
        else:
            logger.warning(f"Action {action_id} {status.value}: {error}")
        return BatchItemResult(
            id=action_id,
            success=status == ActionStatus.completed,
            status=status,
            error=error,
        )

    async def _dispatch(self, action: Action) -> _Outcome:
        if isinstance(action, FileEdit):
            return await self._apply_file_edit(action)
        if isinstance(action, ShellCommand):
            out = await self._collaborator.execute_shell(action.command, cwd=action.working_directory)
            return out.success, out.error
        if isinstance(action, PackageInstall):
            out = await self._collaborator.install_packages(action.language, list(action.packages))
            return out.success, out.error
        if isinstance(action, WorkflowConfiguration):
            out = await self._collaborator.configure_workflow(
                WorkflowConfigureInput(
                    workflow_name=action.workflow_name,
                    commands=list(action.commands),
                    mode=action.mode,
                    set_run_button=action.set_run_button,
                )
            )
            return out.success, out.error
        if isinstance(action, DeploymentConfiguration):
            out = await self._collaborator.configure_deployment(
                DeploymentConfigureInput(build_command=action.build_command, run_command=action.run_command)
            )
            return out.success, out.error
        return False, f"Action kind '{action.kind}' cannot be executed"

    async def _apply_file_edit(self, edit: FileEdit) -> _Outcome:
        if edit.change_type == ChangeType.delete:
            out = await self._collaborator.delete_file(edit.file)
            return out.success, out.error

        if edit.change_type == ChangeType.create:
            written = await self._collaborator.write_file(edit.file, edit.new_content or "")
            return written.success, written.error

        current = await self._collaborator.read_file(edit.file)
        if not current.success or current.content is None:
            return False, current.error or f"Could not read {edit.file}"

        old = edit.old_content or ""
        if old not in current.content:
            if self._strict_substring:
                return False, f"Old content not found in {edit.file}"
            logger.warning(f"Old content not found in {edit.file}; writing it back unchanged")

        updated = current.content.replace(old, edit.new_content or "", 1)
        written = await self._collaborator.write_file(edit.file, updated)
        return written.success, written.error

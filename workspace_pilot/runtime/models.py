"""Batch executor state types.

- ``CancellationToken`` is owned by the caller and checked between actions.
- ``_GraphState`` is the mutable state passed between LangGraph nodes.
"""

from __future__ import annotations

import threading
from typing import List, NotRequired, Optional, Required, TypedDict

from ..queueing.action_queue import ActionQueue
from ..schemas.domain import BatchItemResult


class CancellationToken:
    """Caller-owned flag that stops a batch before its next action.

    Safe to trip from another thread; the action already running is allowed to
    finish.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class _GraphState(TypedDict):
    """Mutable LangGraph state for a single ``process_batch`` call.

    Required keys:

    - ``queue``: the queue whose entries are updated in place.
    - ``ids``: pending ids snapshotted when the batch started, FIFO order.
    - ``idx``: index of the next id to execute.
    - ``results``: per-action results collected so far.

    Optional keys:

    - ``cancel_token``: stops the remaining actions once tripped.
    - ``_finished``: used to terminate the graph.
    """

    queue: Required[ActionQueue]
    ids: Required[List[str]]
    idx: Required[int]
    results: Required[List[BatchItemResult]]
    cancel_token: NotRequired[Optional[CancellationToken]]
    _finished: NotRequired[bool]

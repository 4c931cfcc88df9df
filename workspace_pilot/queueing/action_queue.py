"""Action Queue - ordered, lock-guarded collection of queued actions."""

from __future__ import annotations

import threading
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Mapping, Optional, Union

from ..core.logging_config import get_logger
from ..schemas.domain import (
    Action,
    ActionBatch,
    ActionKind,
    ActionStatus,
    QueuedAction,
    action_from_payload,
)

logger = get_logger(__name__)


class ActionQueue:
    """
    FIFO queue of actions with a per-item status lifecycle.

    The queue exclusively owns its entries. Callers (UI-driven code) enqueue and
    remove; the batch executor updates status through ``update_status``. Both
    go through one re-entrant lock, so the queue can be shared between an event
    loop and worker threads.

    Notes:
        - Reads hand out copies; mutating a returned ``QueuedAction`` has no
          effect on the queue.
        - ``update_status`` and ``remove`` on an unknown id are no-ops, since an
          entry may already have been cleared by another caller.
        - Terminal statuses (completed, failed, cancelled) are final.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._items: "OrderedDict[str, QueuedAction]" = OrderedDict()
        self._counts: Dict[ActionStatus, int] = {status: 0 for status in ActionStatus}

    def enqueue(
        self,
        action: Union[Action, ActionKind, str],
        payload: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """
        Append an action and return its queue id.

        Args:
            action: Either a validated action model, or an action kind when
                ``payload`` carries the raw fields.
            payload: Raw fields for the action kind (only with a kind).

        Raises:
            pydantic.ValidationError: if ``payload`` does not describe a valid action.
        """
        if isinstance(action, (ActionKind, str)):
            action = action_from_payload(action, payload or {})
        item = QueuedAction(action=action)
        with self._lock:
            self._items[item.id] = item
            self._counts[item.status] += 1
        logger.debug(f"Enqueued {item.kind.value} action {item.id}")
        return item.id

    def enqueue_batch(self, batch: ActionBatch) -> List[str]:
        """Enqueue every executable action of ``batch`` in canonical order."""
        return [self.enqueue(action) for action in batch.executable()]

    def get(self, action_id: str) -> Optional[QueuedAction]:
        with self._lock:
            item = self._items.get(action_id)
            return item.model_copy(deep=True) if item is not None else None

    def update_status(self, action_id: str, status: ActionStatus, error: Optional[str] = None) -> bool:
        """
        Move an entry to ``status``.

        Returns:
            True if the entry was updated, False for unknown ids or entries
            already in a terminal state.
        """
        status = ActionStatus(status)
        with self._lock:
            item = self._items.get(action_id)
            if item is None:
                return False
            if item.is_terminal:
                logger.warning(f"Ignoring {status.value} for {action_id}: already {item.status.value}")
                return False
            self._counts[item.status] -= 1
            self._counts[status] += 1
            item.status = status
            item.error = error
            item.updated_at = datetime.now(timezone.utc)
            return True

    def remove(self, action_id: str) -> bool:
        with self._lock:
            item = self._items.pop(action_id, None)
            if item is None:
                return False
            self._counts[item.status] -= 1
            return True

    def clear_completed(self) -> int:
        """Drop every completed entry and return how many were removed."""
        with self._lock:
            done = [action_id for action_id, item in self._items.items() if item.status == ActionStatus.completed]
            for action_id in done:
                del self._items[action_id]
            self._counts[ActionStatus.completed] = 0
            return len(done)

    def clear_all(self) -> int:
        with self._lock:
            removed = len(self._items)
            self._items.clear()
            self._counts = {status: 0 for status in ActionStatus}
            return removed

    def snapshot(self, status: Optional[ActionStatus] = None) -> List[QueuedAction]:
        """Copies of the entries in FIFO order, optionally filtered by status."""
        with self._lock:
            return [
                item.model_copy(deep=True)
                for item in self._items.values()
                if status is None or item.status == status
            ]

    def pending(self) -> List[QueuedAction]:
        return self.snapshot(ActionStatus.pending)

    def __iter__(self) -> Iterator[QueuedAction]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __contains__(self, action_id: object) -> bool:
        with self._lock:
            return action_id in self._items

    @property
    def counts(self) -> Dict[ActionStatus, int]:
        with self._lock:
            return dict(self._counts)

    def count(self, status: ActionStatus) -> int:
        with self._lock:
            return self._counts[ActionStatus(status)]

    @property
    def pending_count(self) -> int:
        return self.count(ActionStatus.pending)

    @property
    def in_progress_count(self) -> int:
        return self.count(ActionStatus.in_progress)

    @property
    def completed_count(self) -> int:
        return self.count(ActionStatus.completed)

    @property
    def failed_count(self) -> int:
        return self.count(ActionStatus.failed)

    @property
    def cancelled_count(self) -> int:
        return self.count(ActionStatus.cancelled)

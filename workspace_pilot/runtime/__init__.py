"""Batch execution runtime.

``BatchExecutor`` drains pending queue entries through a LangGraph state
machine; ``CancellationToken`` lets the caller stop a batch between actions.
"""

from .executor import BatchExecutor
from .models import CancellationToken

__all__ = ["BatchExecutor", "CancellationToken"]

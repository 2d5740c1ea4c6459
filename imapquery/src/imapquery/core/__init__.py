"""Query execution core.

What:
  Expose :func:`run_query` and the types describing how a query is dispatched
  to a folder handle.

Interfaces:
  ``run_query``, ``select_strategy``, ``Strategy``, ``FolderHandle``,
  ``QueryBlock``.
"""

from .executor import FolderHandle, QueryBlock, Strategy, run_query, select_strategy

__all__ = [
    "FolderHandle",
    "QueryBlock",
    "Strategy",
    "run_query",
    "select_strategy",
]

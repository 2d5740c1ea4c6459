"""
Module: imapquery.__init__

What:
  Aggregate package exports for imapquery, a typed query layer over IMAP
  mailboxes: a composable search algebra, sort keys, fetch profiles and a
  folder-scoped session that runs queries and returns read-only messages.

Why:
  Callers write a query block against :class:`SearchBuilder` and run it on a
  folder. Centralising the names they need keeps that entry point stable while
  the internal layout evolves.

How:
  Import the public types from their owning subpackages and enumerate them in
  ``__all__`` alongside the subpackages themselves.

Interfaces:
  - config: Runtime configuration loader and pydantic schema.
  - core: Query execution strategy and :func:`run_query`.
  - imap: Session client, folder handle, fetch profiles and messages.
  - search: Terms, combinators, builders and criteria translation.
  - utils: Structured logging and MIME helpers.

Invariants:
  - Importing the package performs no network or filesystem access.
"""

from .errors import FolderClosedError, ImapQueryError, MessageDetachedError, RateLimitExceeded
from .flags import Flag, Flags
from .imap import (
    FetchItem,
    FetchProfile,
    Folder,
    FolderMode,
    FolderType,
    ImapConfig,
    ImapQueryClient,
    Message,
    MessageHeader,
)
from .search import ReceivedDate, SearchBuilder, SentDate, Size, SortBuilder, SortKey

__all__ = [
    "config",
    "core",
    "imap",
    "search",
    "utils",
    "FetchItem",
    "FetchProfile",
    "Flag",
    "Flags",
    "Folder",
    "FolderClosedError",
    "FolderMode",
    "FolderType",
    "ImapConfig",
    "ImapQueryClient",
    "ImapQueryError",
    "Message",
    "MessageDetachedError",
    "MessageHeader",
    "RateLimitExceeded",
    "ReceivedDate",
    "SearchBuilder",
    "SentDate",
    "Size",
    "SortBuilder",
    "SortKey",
]

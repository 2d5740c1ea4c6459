"""Run a configured query against a folder handle.

What:
  :func:`run_query` builds a :class:`~imapquery.search.builder.SearchBuilder`,
  lets the caller's block configure it, picks exactly one retrieval strategy,
  pre-fetches the results, wraps them as :class:`~imapquery.imap.message.Message`
  values and optionally flags them ``\\Seen``.

Why:
  The decision between plain search, sorted search and pure sort, and the
  ordering of fetch, mapping and flag mutation, is the part of the package
  with real rules. Keeping it in one function over an abstract
  :class:`FolderHandle` makes those rules testable without a server.

How:
  1. Build the predicate and read the sort keys.
  2. :func:`select_strategy` maps ``(predicate, keys)`` to a :class:`Strategy`.
     With neither, return ``[]`` without touching the handle.
  3. Call the matching handle operation, then ``fetch`` once with the whole
     result and the active profile.
  4. Map every raw message, then issue one batched ``set_flag`` when the block
     asked for mark-as-read and something matched.

Interfaces:
  :func:`run_query`, :func:`select_strategy`, :class:`Strategy`,
  :class:`FolderHandle`, :data:`QueryBlock`.

Invariants & Safety:
  - Results keep the order returned by the handle; nothing is re-sorted here.
  - Handle errors propagate unchanged and no partial result is returned.
  - The handle is only borrowed for the duration of the call.
"""
from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Callable, List, Optional, Protocol, Sequence

from ..flags import Flag
from ..search.builder import SearchBuilder
from ..search.sort import SortKey
from ..search.terms import Term
from ..utils.logging import JsonLogger, get_logger

if TYPE_CHECKING:  # pragma: no cover
    from ..imap.fetch import FetchProfile
    from ..imap.message import Message, RawMessage

QueryBlock = Callable[[SearchBuilder], None]

_LOGGER = get_logger("imapquery.query")


class FolderHandle(Protocol):
    """Capabilities :func:`run_query` needs from an open folder."""

    @property
    def name(self) -> str: ...

    @property
    def fetch_profile(self) -> "FetchProfile": ...

    def search(self, predicate: Term) -> Sequence["RawMessage"]: ...

    def search_sorted(self, predicate: Term, order: Sequence[SortKey]) -> Sequence["RawMessage"]: ...

    def sort_only(self, order: Sequence[SortKey]) -> Sequence["RawMessage"]: ...

    def fetch(self, messages: Sequence["RawMessage"], profile: "FetchProfile") -> None: ...

    def set_flag(self, messages: Sequence["RawMessage"], flag: Flag, value: bool) -> None: ...

    def close(self, expunge: bool = False) -> None: ...


class Strategy(str, Enum):
    NONE = "none"
    SEARCH = "search"
    SORTED_SEARCH = "sorted_search"
    SORT = "sort"


def select_strategy(predicate: Optional[Term], order: Sequence[SortKey]) -> Strategy:
    """Choose the remote operation for a predicate/sort combination."""

    if predicate is not None:
        return Strategy.SORTED_SEARCH if order else Strategy.SEARCH
    return Strategy.SORT if order else Strategy.NONE


def run_query(
    folder: FolderHandle,
    block: QueryBlock,
    *,
    profile: Optional["FetchProfile"] = None,
    logger: Optional[JsonLogger] = None,
) -> List["Message"]:
    """Execute ``block`` against ``folder`` and return the matching messages.

    Args:
      folder: Open folder handle; borrowed for this call only.
      block: Callable configuring the :class:`SearchBuilder` it receives.
      profile: Fetch profile for the results; defaults to
        ``folder.fetch_profile``.
      logger: Structured logger; defaults to the ``imapquery.query`` logger.

    Returns:
      Messages in the order produced by the server.
    """

    from ..imap.message import Message

    log = logger or _LOGGER
    builder = SearchBuilder()
    block(builder)
    predicate = builder.build()
    order = builder.sort_keys
    strategy = select_strategy(predicate, order)
    if strategy is Strategy.NONE:
        log.info("query_skipped", folder=folder.name)
        return []

    log.info("query_started", folder=folder.name, strategy=strategy.value)
    if strategy is Strategy.SEARCH:
        raw = list(folder.search(predicate))  # type: ignore[arg-type]
    elif strategy is Strategy.SORTED_SEARCH:
        raw = list(folder.search_sorted(predicate, order))  # type: ignore[arg-type]
    else:
        raw = list(folder.sort_only(order))

    folder.fetch(raw, profile if profile is not None else folder.fetch_profile)
    messages = [Message(message) for message in raw]
    marked = builder.should_mark_as_read and bool(raw)
    if marked:
        folder.set_flag(raw, Flag.SEEN, True)
    log.info(
        "query_completed",
        folder=folder.name,
        strategy=strategy.value,
        count=len(messages),
        marked_read=marked,
    )
    return messages

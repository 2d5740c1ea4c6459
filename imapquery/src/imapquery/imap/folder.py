"""Folder handle bound to one selected IMAP mailbox.

What:
  :class:`Folder` is the only channel through which queries reach the server.
  It implements the handle operations used by
  :func:`imapquery.core.executor.run_query` (``search``, ``search_sorted``,
  ``sort_only``, ``fetch``, ``set_flag``, ``close``) and the folder-level
  conveniences callers use directly (``query``, ``sorted_by``, counters,
  ``folder_type``, ``get``, ``messages_in``).

Why:
  Binding the selected mailbox, its access mode, the default fetch profile and
  the open/closed state to one object lets messages know whether they can still
  load attributes lazily, and keeps every ``imapclient`` call in one module.

How:
  Wraps the ``IMAPClient`` owned by :class:`~imapquery.imap.client.ImapQueryClient`
  in UID mode. Terms and sort keys are translated through
  :mod:`imapquery.search.criteria`; fetch responses are merged into the
  :class:`~imapquery.imap.message.RawMessage` records. Server errors are never
  caught here.

Interfaces:
  :class:`Folder`, :class:`FolderMode`, :class:`FolderType`.

Invariants & Safety:
  - After :meth:`Folder.close` every handle operation raises
    :class:`~imapquery.errors.FolderClosedError`.
  - Flag mutations go through the session's rate limiter and are issued as a
    single batched ``STORE``.
  - Closing without expunge never removes ``\\Deleted`` messages.
"""
from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Callable, Iterable, List, Optional, Sequence, Union

from ..core.executor import QueryBlock, run_query
from ..errors import FolderClosedError
from ..flags import FlagLike, Flags
from ..search.criteria import to_criteria, to_sort_criteria
from ..search.sort import SortBuilder, SortKey
from ..search.terms import Term
from ..utils.logging import JsonLogger, get_logger
from .fetch import FetchItem, FetchProfile
from .message import Message, RawMessage

if TYPE_CHECKING:  # pragma: no cover
    from .client import ImapQueryClient


class FolderMode(Enum):
    READ_ONLY = "read_only"
    READ_WRITE = "read_write"


class FolderType(Enum):
    """What a mailbox may contain, derived from its ``LIST`` attributes."""

    HOLDS_FOLDERS = "holds_folders"
    HOLDS_MESSAGES = "holds_messages"
    HOLDS_BOTH = "holds_both"

    @classmethod
    def from_list_flags(cls, flags: Iterable[Union[bytes, str]]) -> "FolderType":
        """Map RFC 3501 mailbox attributes onto a folder type.

        ``\\Noselect`` rules out messages and ``\\Noinferiors`` rules out child
        folders. A mailbox carrying both is reported as holding folders.
        """

        names = {
            (flag.decode("ascii", "replace") if isinstance(flag, bytes) else flag).lower()
            for flag in flags
        }
        holds_messages = "\\noselect" not in names
        holds_folders = "\\noinferiors" not in names
        if holds_messages and holds_folders:
            return cls.HOLDS_BOTH
        if holds_messages:
            return cls.HOLDS_MESSAGES
        return cls.HOLDS_FOLDERS


class Folder:
    """An open mailbox; obtain one through :meth:`ImapQueryClient.folder`."""

    def __init__(
        self,
        session: "ImapQueryClient",
        name: str,
        mode: FolderMode,
        *,
        fetch_profile: Optional[FetchProfile] = None,
        charset: str = "UTF-8",
        logger: Optional[JsonLogger] = None,
    ) -> None:
        self._session = session
        self._name = name
        self._mode = mode
        self._fetch_profile = fetch_profile or FetchProfile()
        self._charset = charset
        self._open = True
        self.logger = logger or get_logger("imapquery.folder")

    @property
    def name(self) -> str:
        return self._name

    @property
    def mode(self) -> FolderMode:
        return self._mode

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def fetch_profile(self) -> FetchProfile:
        """Profile applied to query results when the caller passes none."""

        return self._fetch_profile

    def pre_fetch_by(self, *items: Union[FetchProfile, FetchItem]) -> None:
        """Replace the default fetch profile.

        Accepts either a single :class:`FetchProfile` or any number of
        :class:`FetchItem` values.
        """

        if len(items) == 1 and isinstance(items[0], FetchProfile):
            self._fetch_profile = items[0]
        else:
            self._fetch_profile = FetchProfile(*items)  # type: ignore[arg-type]

    @property
    def _client(self):
        if not self._open:
            raise FolderClosedError(self._name)
        return self._session.client

    def _wrap(self, uids: Iterable[int]) -> List[RawMessage]:
        return [RawMessage(int(uid), folder=self) for uid in uids]

    # Handle operations ------------------------------------------------------
    def search(self, predicate: Term) -> List[RawMessage]:
        criteria = to_criteria(predicate, self._charset)
        return self._wrap(self._client.search(criteria, charset=self._charset))

    def search_sorted(self, predicate: Term, order: Sequence[SortKey]) -> List[RawMessage]:
        uids = self._client.sort(
            to_sort_criteria(order), to_criteria(predicate, self._charset), charset=self._charset
        )
        return self._wrap(uids)

    def sort_only(self, order: Sequence[SortKey]) -> List[RawMessage]:
        return self._wrap(self._client.sort(to_sort_criteria(order), "ALL", charset=self._charset))

    def fetch(self, messages: Sequence[RawMessage], profile: FetchProfile) -> None:
        """Populate ``messages`` with the attributes named by ``profile``."""

        client = self._client
        if not messages or not profile:
            return
        response = client.fetch([message.uid for message in messages], profile.data_items())
        for message in messages:
            message.update(response.get(message.uid, {}))

    def set_flag(
        self, messages: Sequence[RawMessage], flag: Union[Flags, FlagLike], value: bool
    ) -> None:
        """Set or clear ``flag`` on all ``messages`` with one ``STORE`` command.

        ``flag`` may be a system :class:`Flag`, a user keyword such as
        ``"$Work"``, or a :class:`Flags` set mixing both.
        """

        client = self._client
        uids = [message.uid for message in messages]
        if not uids:
            return
        values = Flags.of(flag).to_imap()
        if not values:
            return
        self._session.throttle()
        if value:
            client.add_flags(uids, values)
        else:
            client.remove_flags(uids, values)

    def close(self, expunge: bool = False) -> None:
        """Release the mailbox; later attribute reads on unfetched data fail.

        With ``expunge`` on a read-write folder this issues ``CLOSE``. Otherwise
        ``UNSELECT`` is used when the server supports it, falling back to
        ``CLOSE`` on a read-only re-selection so nothing is expunged.
        """

        if not self._open:
            return
        client = self._session.client
        try:
            if expunge and self._mode is FolderMode.READ_WRITE:
                client.close_folder()
            elif client.has_capability("UNSELECT"):
                client.unselect_folder()
            else:
                if self._mode is FolderMode.READ_WRITE:
                    client.select_folder(self._name, readonly=True)
                client.close_folder()
        finally:
            self._open = False

    # Caller conveniences ----------------------------------------------------
    def query(self, block: QueryBlock, *, profile: Optional[FetchProfile] = None) -> List[Message]:
        """Run a search block against this folder; see :func:`run_query`."""

        return run_query(self, block, profile=profile, logger=self.logger)

    def sorted_by(self, block: Callable[[SortBuilder], None]) -> List[Message]:
        """Return every message in the order configured by ``block``."""

        return self.query(lambda search: search.sorted_by(block))

    def _status(self, item: bytes) -> int:
        status = self._client.folder_status(self._name, [item])
        return int(status[item])

    @property
    def message_count(self) -> int:
        return self._status(b"MESSAGES")

    @property
    def unread_message_count(self) -> int:
        return self._status(b"UNSEEN")

    @property
    def new_message_count(self) -> int:
        return self._status(b"RECENT")

    def has_new_messages(self) -> bool:
        return self.new_message_count > 0

    @property
    def folder_type(self) -> FolderType:
        """Whether this mailbox holds messages, child folders or both."""

        for flags, _delimiter, name in self._client.list_folders("", self._name):
            if name == self._name:
                return FolderType.from_list_flags(flags)
        # selected successfully but not listed; it holds messages at least
        return FolderType.HOLDS_MESSAGES

    def get(self, number: int) -> Optional[Message]:
        """Message with sequence ``number``, or ``None`` when there is none."""

        raw = self._wrap(self._client.search([number]))
        if not raw:
            return None
        self.fetch(raw, self._fetch_profile)
        return Message(raw[0])

    def messages_in(self, first: int, last: int, prefetch: bool = True) -> List[Message]:
        """Messages whose sequence numbers fall in ``first..last`` inclusive."""

        raw = self._wrap(self._client.search([f"{first}:{last}"]))
        if prefetch:
            self.fetch(raw, self._fetch_profile)
        return [Message(message) for message in raw]

    def __repr__(self) -> str:
        state = "open" if self._open else "closed"
        return f"Folder({self._name!r}, {self._mode.value}, {state})"

"""Read-only message projection over handle-owned fetch data.

What:
  :class:`RawMessage` is what a folder handle returns from a search: a UID plus
  whatever attributes have been fetched for it so far. :class:`Message` wraps a
  raw message and exposes the fixed projection callers consume: ``uid``,
  ``from_``, ``body_text`` and ``headers``.

Why:
  Attribute reads must behave the same whether the data was pre-fetched or
  not, as long as the folder is open. Once the folder is closed, a missing
  attribute can no longer be retrieved and must fail loudly instead of
  degrading to an empty value.

How:
  Each projected attribute names the fetch items able to satisfy it. The first
  one present in the raw data is used; otherwise the owning folder is asked to
  fetch the preferred item, or :class:`~imapquery.errors.MessageDetachedError`
  is raised when the folder is gone. Computed values are cached on the
  :class:`Message` with :func:`functools.cached_property`.

Interfaces:
  :class:`RawMessage`, :class:`Message`, :class:`MessageHeader`.

Invariants & Safety:
  - :class:`Message` never mutates the raw data except through the folder's
    ``fetch`` while the folder is open.
  - A value read once stays readable after the folder closes.
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional

from ..errors import MessageDetachedError
from ..utils.mime import extract_body_text, parse_headers, parse_message
from .fetch import FetchItem, FetchProfile

if TYPE_CHECKING:  # pragma: no cover
    from .folder import Folder


@dataclass(frozen=True)
class MessageHeader:
    name: str
    value: str


class RawMessage:
    """A message as known to its folder handle: UID plus fetched attributes."""

    __slots__ = ("uid", "data", "folder")

    def __init__(self, uid: int, folder: Optional["Folder"] = None) -> None:
        self.uid = uid
        self.data: Dict[bytes, Any] = {}
        self.folder = folder

    def update(self, data: Mapping[bytes, Any]) -> None:
        self.data.update(data)

    def __repr__(self) -> str:
        return f"RawMessage(uid={self.uid}, fetched={sorted(key.decode() for key in self.data)})"


class Message:
    """Typed, read-only view of one message."""

    def __init__(self, raw: RawMessage) -> None:
        self._raw = raw

    @property
    def uid(self) -> int:
        return self._raw.uid

    @cached_property
    def from_(self) -> str:
        """First ``From`` address, formatted as ``Name <user@host>``."""

        item = self._require("from", FetchItem.ENVELOPE, FetchItem.HEADERS, FetchItem.BODY)
        value = self._raw.data[item.response_key]
        if item is FetchItem.ENVELOPE:
            senders = value.from_ or ()
            return str(senders[0]) if senders else ""
        for name, header in parse_headers(value):
            if name.lower() == "from":
                return header
        return ""

    @cached_property
    def body_text(self) -> str:
        item = self._require("body_text", FetchItem.BODY)
        return extract_body_text(parse_message(self._raw.data[item.response_key]))

    @cached_property
    def headers(self) -> List[MessageHeader]:
        item = self._require("headers", FetchItem.HEADERS, FetchItem.BODY)
        return [
            MessageHeader(name, value)
            for name, value in parse_headers(self._raw.data[item.response_key])
        ]

    def _require(self, attribute: str, *items: FetchItem) -> FetchItem:
        for item in items:
            if item.response_key in self._raw.data:
                return item
        folder = self._raw.folder
        if folder is None or not folder.is_open:
            raise MessageDetachedError(self._raw.uid, attribute)
        preferred = items[0]
        folder.fetch([self._raw], FetchProfile(preferred))
        if preferred.response_key not in self._raw.data:
            raise MessageDetachedError(self._raw.uid, attribute)
        return preferred

    def __repr__(self) -> str:
        return f"Message(uid={self.uid})"

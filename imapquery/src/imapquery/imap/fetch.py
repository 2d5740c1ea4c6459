"""Fetch profiles: which message attributes to retrieve in one batch.

What:
  :class:`FetchItem` names the attribute categories a caller can ask for up
  front; :class:`FetchProfile` is an immutable set of them that knows the
  matching IMAP ``FETCH`` data items.

Why:
  Any attribute not retrieved before its folder is closed becomes unreadable.
  Naming the categories once keeps the executor, the folder and the message
  projection in agreement about which response key satisfies which attribute.

Interfaces:
  :class:`FetchItem`, :class:`FetchProfile`.
"""
from __future__ import annotations

from enum import Enum
from typing import FrozenSet, Iterable, Iterator, List, Union


class FetchItem(Enum):
    """Attribute categories; values are ``(fetch data item, response key)``."""

    UID = ("UID", b"UID")
    ENVELOPE = ("ENVELOPE", b"ENVELOPE")
    FLAGS = ("FLAGS", b"FLAGS")
    SIZE = ("RFC822.SIZE", b"RFC822.SIZE")
    CONTENT_INFO = ("BODYSTRUCTURE", b"BODYSTRUCTURE")
    HEADERS = ("BODY.PEEK[HEADER]", b"BODY[HEADER]")
    BODY = ("BODY.PEEK[]", b"BODY[]")

    @property
    def data_item(self) -> str:
        return self.value[0]

    @property
    def response_key(self) -> bytes:
        return self.value[1]

    @classmethod
    def from_name(cls, name: str) -> "FetchItem":
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown fetch item: {name!r}") from None


class FetchProfile:
    """Immutable set of :class:`FetchItem` values."""

    __slots__ = ("_items",)

    def __init__(self, *items: FetchItem) -> None:
        self._items: FrozenSet[FetchItem] = frozenset(items)

    @classmethod
    def of(cls, items: Union["FetchProfile", FetchItem, Iterable[FetchItem]]) -> "FetchProfile":
        if isinstance(items, FetchProfile):
            return items
        if isinstance(items, FetchItem):
            return cls(items)
        return cls(*items)

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "FetchProfile":
        """Build a profile from configuration names such as ``["envelope", "flags"]``."""

        return cls(*(FetchItem.from_name(name) for name in names))

    def add(self, *items: FetchItem) -> "FetchProfile":
        return FetchProfile(*self._items, *items)

    def data_items(self) -> List[str]:
        """IMAP data items in declaration order, ready for ``IMAPClient.fetch``."""

        return [item.data_item for item in FetchItem if item in self._items]

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def __iter__(self) -> Iterator[FetchItem]:
        return (item for item in FetchItem if item in self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FetchProfile):
            return NotImplemented
        return self._items == other._items

    def __hash__(self) -> int:
        return hash(self._items)

    def __repr__(self) -> str:
        return f"FetchProfile({', '.join(item.name for item in self)})"

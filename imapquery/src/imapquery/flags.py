"""Message flag vocabulary used by search terms and flag mutations.

What:
  Map the IMAP system flags onto a Python :class:`~enum.Enum` backed by the
  ``imapclient`` byte constants, and provide an immutable :class:`Flags` set that
  may also carry user-defined keywords.

Why:
  Search terms need to know whether a flag is a system flag (``SEEN`` /
  ``UNSEEN``) or a keyword (``KEYWORD foo``), while flag mutations need the raw
  bytes expected by ``IMAPClient.add_flags``. Keeping both views on one type
  avoids string juggling at call sites.

Interfaces:
  :class:`Flag`, :class:`Flags`.
"""
from __future__ import annotations

from enum import Enum
from typing import FrozenSet, Iterable, Union

import imapclient


class Flag(Enum):
    """IMAP system flags."""

    ANSWERED = imapclient.ANSWERED
    DELETED = imapclient.DELETED
    DRAFT = imapclient.DRAFT
    FLAGGED = imapclient.FLAGGED
    RECENT = imapclient.RECENT
    SEEN = imapclient.SEEN

    @property
    def search_key(self) -> str:
        """Keyword used in SEARCH when the flag must be set (``SEEN``)."""

        return self.name

    @property
    def negated_search_key(self) -> str:
        """Keyword used in SEARCH when the flag must be clear (``UNSEEN``)."""

        # RFC 3501 spells "not recent" as OLD rather than UNRECENT.
        if self is Flag.RECENT:
            return "OLD"
        return "UN" + self.name


FlagLike = Union[Flag, str]


class Flags:
    """Immutable set of system flags and user keywords.

    Instances compare and hash by content so they can live inside frozen
    search terms.
    """

    __slots__ = ("_system", "_keywords")

    def __init__(self, *flags: FlagLike) -> None:
        system = set()
        keywords = set()
        for flag in flags:
            if isinstance(flag, Flag):
                system.add(flag)
            else:
                keywords.add(str(flag))
        self._system: FrozenSet[Flag] = frozenset(system)
        self._keywords: FrozenSet[str] = frozenset(keywords)

    @classmethod
    def of(cls, flags: Union["Flags", FlagLike, Iterable[FlagLike]]) -> "Flags":
        if isinstance(flags, Flags):
            return flags
        if isinstance(flags, (Flag, str)):
            return cls(flags)
        return cls(*flags)

    @property
    def system_flags(self) -> FrozenSet[Flag]:
        return self._system

    @property
    def user_flags(self) -> FrozenSet[str]:
        return self._keywords

    def to_imap(self) -> list:
        """Return the flag values as accepted by ``IMAPClient.add_flags``."""

        values: list = [flag.value for flag in sorted(self._system, key=lambda f: f.name)]
        values.extend(sorted(self._keywords))
        return values

    def __contains__(self, flag: object) -> bool:
        return flag in self._system or flag in self._keywords

    def __iter__(self):
        yield from sorted(self._system, key=lambda f: f.name)
        yield from sorted(self._keywords)

    def __len__(self) -> int:
        return len(self._system) + len(self._keywords)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Flags):
            return NotImplemented
        return self._system == other._system and self._keywords == other._keywords

    def __hash__(self) -> int:
        return hash((self._system, self._keywords))

    def __repr__(self) -> str:
        return f"Flags({', '.join(repr(flag) for flag in self)})"

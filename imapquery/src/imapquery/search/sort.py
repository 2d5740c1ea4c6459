"""Sort keys and the builder that orders them for IMAP SORT (RFC 5256).

What:
  Enumerate the sortable attributes plus the ``REVERSE`` modifier and collect
  them, in priority order, through :class:`SortBuilder`.

Why:
  The server reads ``REVERSE`` as a prefix of the key that follows it, so the
  only thing this layer must get right is adjacency. Nothing is normalised:
  repeated or contradictory keys reach the server exactly as written.

Interfaces:
  :class:`SortKey`, :class:`SortBuilder`.
"""
from __future__ import annotations

from enum import Enum
from typing import List, Optional, Union


class SortKey(Enum):
    """Sort criteria; values are the RFC 5256 key names."""

    FROM = "FROM"
    TO = "TO"
    CC = "CC"
    SUBJECT = "SUBJECT"
    ARRIVAL = "ARRIVAL"
    SENT = "DATE"
    SIZE = "SIZE"
    REVERSE = "REVERSE"

    @classmethod
    def from_criterion(cls, criterion: Union[str, bytes]) -> Optional["SortKey"]:
        """Look up a key by its IMAP name (``"DATE"``) or member name (``"sent"``)."""

        if isinstance(criterion, bytes):
            criterion = criterion.decode("ascii", errors="ignore")
        text = criterion.strip().upper()
        for key in cls:
            if key.value == text or key.name == text:
                return key
        return None


class SortBuilder:
    """Accumulate sort keys in priority order (first key wins)."""

    def __init__(self) -> None:
        self._keys: List[SortKey] = []

    def add(self, key: Union[SortKey, str]) -> None:
        """Append ``key``.

        Raw criterion strings are translated through
        :meth:`SortKey.from_criterion`; names that match no key are ignored.
        """

        resolved = _resolve(key)
        if resolved is not None:
            self._keys.append(resolved)

    def negate(self, key: Union[SortKey, str]) -> None:
        """Append ``REVERSE`` immediately followed by ``key``."""

        resolved = _resolve(key)
        if resolved is not None:
            self._keys.extend((SortKey.REVERSE, resolved))

    def build(self) -> List[SortKey]:
        """Return the keys as accumulated; an empty list means no ordering."""

        return list(self._keys)

    def __len__(self) -> int:
        return len(self._keys)


def _resolve(key: Union[SortKey, str, bytes]) -> Optional[SortKey]:
    if isinstance(key, SortKey):
        return key
    return SortKey.from_criterion(key)

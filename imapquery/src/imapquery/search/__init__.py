"""Search algebra: terms, the predicate builder, sort keys and criteria translation.

What:
  Re-export the value types and builders callers use to describe a query.

Why:
  Query blocks only need this package; the IMAP layer depends on it, never the
  other way around.

Interfaces:
  Term variants and combinators, :class:`SearchBuilder`, :class:`SortBuilder`,
  :class:`SortKey`, :func:`to_criteria`, :func:`to_sort_criteria`.
"""

from .builder import SearchBuilder
from .criteria import to_criteria, to_sort_criteria
from .sort import SortBuilder, SortKey
from .terms import (
    Age,
    AgeComparator,
    AddressMatch,
    And,
    Compare,
    CompareAttribute,
    Comparator,
    FlagState,
    MessageId,
    MessageNumber,
    ModifiedSince,
    Not,
    Or,
    ReceivedDate,
    SentDate,
    Size,
    Term,
    TextField,
    TextMatch,
    and_,
    not_,
    or_,
)

__all__ = [
    "Age",
    "AgeComparator",
    "AddressMatch",
    "And",
    "Compare",
    "CompareAttribute",
    "Comparator",
    "FlagState",
    "MessageId",
    "MessageNumber",
    "ModifiedSince",
    "Not",
    "Or",
    "ReceivedDate",
    "SearchBuilder",
    "SentDate",
    "Size",
    "SortBuilder",
    "SortKey",
    "Term",
    "TextField",
    "TextMatch",
    "and_",
    "not_",
    "or_",
    "to_criteria",
    "to_sort_criteria",
]

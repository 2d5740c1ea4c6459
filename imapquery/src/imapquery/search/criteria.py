"""Translate search terms and sort keys into ``imapclient`` criteria lists.

What:
  Provide a deterministic mapping from :data:`~imapquery.search.terms.Term`
  trees to the nested criteria lists consumed by ``IMAPClient.search`` and
  ``IMAPClient.sort``, and from :class:`~imapquery.search.sort.SortKey`
  sequences to RFC 5256 sort criteria.

Why:
  IMAP search syntax is positional and has no direct spelling for several
  comparisons (``size == n``, ``date > d``). Keeping the translation in one
  place keeps the rest of the package free of protocol strings and makes the
  tricky expansions easy to unit test.

How:
  Walks the tree recursively. Leaves map onto search keys; ``And`` places both
  operands side by side, ``Or`` emits ``OR`` and ``Not`` emits ``NOT``. Every
  operand of a combinator is wrapped in its own list so ``imapclient`` puts it
  in parentheses, which preserves the tree shape exactly. Dates and integers
  are passed through unchanged so ``imapclient`` formats them. When a charset
  is given, text and address patterns are encoded to ``bytes`` up front:
  ``imapclient`` encodes nested lists as US-ASCII whatever charset the command
  declares, but passes ``bytes`` through untouched.

Interfaces:
  :func:`to_criteria`, :func:`to_sort_criteria`.

Invariants & Safety:
  - Only the closed set of term variants is accepted; anything else raises
    :class:`TypeError` rather than being stringified into the command.
  - ``REVERSE`` sort entries are emitted verbatim in their original position.
  - With a charset, no ``str`` pattern reaches ``imapclient`` at any depth.
"""
from __future__ import annotations

from typing import Iterable, List, Optional, Union

from .sort import SortKey
from .terms import (
    AddressMatch,
    Age,
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
    Term,
    TextField,
    TextMatch,
)

_DATE_PREFIX = {
    CompareAttribute.RECEIVED_DATE: "",
    CompareAttribute.SENT_DATE: "SENT",
}


def _date_criteria(prefix: str, comparator: Comparator, value: object) -> List[object]:
    on = [prefix + "ON", value]
    if comparator is Comparator.EQ:
        return on
    if comparator is Comparator.NE:
        return ["NOT", on]
    if comparator is Comparator.LT:
        return [prefix + "BEFORE", value]
    if comparator is Comparator.GE:
        return [prefix + "SINCE", value]
    if comparator is Comparator.LE:
        return ["OR", [prefix + "BEFORE", value], on]
    # GT: on or after the day, but not the day itself
    return [prefix + "SINCE", value, "NOT", on]


def _size_criteria(comparator: Comparator, value: object) -> List[object]:
    larger = ["LARGER", value]
    smaller = ["SMALLER", value]
    if comparator is Comparator.GT:
        return larger
    if comparator is Comparator.LT:
        return smaller
    if comparator is Comparator.GE:
        return ["NOT", smaller]
    if comparator is Comparator.LE:
        return ["NOT", larger]
    if comparator is Comparator.EQ:
        return ["NOT", larger, "NOT", smaller]
    return ["OR", larger, smaller]


def _flag_criteria(term: FlagState) -> List[object]:
    criteria: List[object] = []
    for flag in sorted(term.flags.system_flags, key=lambda f: f.name):
        criteria.append(flag.search_key if term.expected else flag.negated_search_key)
    for keyword in sorted(term.flags.user_flags):
        criteria.extend(["KEYWORD" if term.expected else "UNKEYWORD", keyword])
    # an empty flag set constrains nothing
    return criteria or ["ALL"]


def _pattern(value: str, charset: Optional[str]) -> Union[str, bytes]:
    return value.encode(charset) if charset else value


def to_criteria(term: Term, charset: Optional[str] = None) -> List[object]:
    """Convert ``term`` into an ``imapclient`` search criteria list.

    Args:
      term: Predicate tree produced by the search algebra.
      charset: Charset declared on the SEARCH/SORT command. When set, text
        and address patterns are returned as ``bytes`` in that charset.

    Returns:
      Criteria list suitable for ``IMAPClient.search`` or the ``criteria``
      argument of ``IMAPClient.sort``.

    Raises:
      TypeError: If ``term`` is not one of the known term variants.
      UnicodeEncodeError: If a pattern cannot be represented in ``charset``.
    """

    if isinstance(term, And):
        return [to_criteria(term.left, charset), to_criteria(term.right, charset)]
    if isinstance(term, Or):
        return ["OR", to_criteria(term.left, charset), to_criteria(term.right, charset)]
    if isinstance(term, Not):
        return ["NOT", to_criteria(term.inner, charset)]
    if isinstance(term, Compare):
        if term.attribute is CompareAttribute.SIZE:
            return _size_criteria(term.comparator, term.value)
        return _date_criteria(_DATE_PREFIX[term.attribute], term.comparator, term.value)
    if isinstance(term, TextMatch):
        if term.field is TextField.HEADER:
            return ["HEADER", term.header or "", _pattern(term.pattern, charset)]
        return [term.field.name, _pattern(term.pattern, charset)]
    if isinstance(term, AddressMatch):
        return [term.field.name, _pattern(term.address, charset)]
    if isinstance(term, FlagState):
        return _flag_criteria(term)
    if isinstance(term, MessageId):
        return ["HEADER", "Message-ID", _pattern(term.pattern, charset)]
    if isinstance(term, MessageNumber):
        return [term.number]
    if isinstance(term, ModifiedSince):
        return ["MODSEQ", term.sequence]
    if isinstance(term, Age):
        return [term.comparator.name, term.interval]
    raise TypeError(f"Unsupported search term: {term!r}")


def to_sort_criteria(keys: Iterable[SortKey]) -> List[str]:
    """Return RFC 5256 sort criteria for ``keys`` in their given order."""

    return [key.value for key in keys]

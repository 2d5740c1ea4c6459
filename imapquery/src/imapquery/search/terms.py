"""Immutable predicate tree for IMAP searches.

What:
  Define one frozen dataclass per kind of search condition together with the
  boolean combinators (:func:`and_`, :func:`or_`, :func:`not_`) and the
  comparison namespaces :class:`ReceivedDate`, :class:`SentDate` and
  :class:`Size`.

Why:
  Building searches as values rather than strings keeps them comparable in tests
  and lets :mod:`imapquery.search.criteria` own every detail of the IMAP
  syntax. The set of variants is closed: code that walks a tree dispatches on
  the members of :data:`Term` and nothing else.

How:
  Variants share the :class:`_TermOps` mixin which maps ``&``, ``|`` and ``~``
  onto the combinators. Combinators always return new instances and never
  flatten chains: ``a & b & c`` is ``And(And(a, b), c)``. The only
  simplification performed anywhere is the double negation collapse in
  :func:`not_`.

Interfaces:
  Variants :class:`Compare`, :class:`TextMatch`, :class:`AddressMatch`,
  :class:`FlagState`, :class:`MessageId`, :class:`MessageNumber`,
  :class:`ModifiedSince`, :class:`Age`, :class:`And`, :class:`Or`,
  :class:`Not`; the :data:`Term` union; combinators and comparison namespaces.

Invariants & Safety:
  - ``not_(not_(x)) == x`` for every term ``x``.
  - ``between`` helpers never validate ``lo <= hi``; an inverted range yields a
    predicate that simply cannot match.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Iterator, Optional, Tuple, Union

from ..flags import Flags


class Comparator(str, Enum):
    """Comparison operators for date and size terms."""

    EQ = "eq"
    NE = "ne"
    LT = "lt"
    LE = "le"
    GT = "gt"
    GE = "ge"


class CompareAttribute(str, Enum):
    RECEIVED_DATE = "received_date"
    SENT_DATE = "sent_date"
    SIZE = "size"


class TextField(str, Enum):
    """Message fields that can be matched by substring."""

    FROM = "from"
    TO = "to"
    CC = "cc"
    BCC = "bcc"
    SUBJECT = "subject"
    BODY = "body"
    HEADER = "header"


RECIPIENT_FIELDS = (TextField.TO, TextField.CC, TextField.BCC)


class AgeComparator(str, Enum):
    OLDER = "older"
    YOUNGER = "younger"


class _TermOps:
    """Operator sugar shared by every term variant."""

    __slots__ = ()

    def __and__(self, other: "Term") -> "Term":
        return and_(self, other)  # type: ignore[arg-type]

    def __or__(self, other: "Term") -> "Term":
        return or_(self, other)  # type: ignore[arg-type]

    def __invert__(self) -> "Term":
        return not_(self)  # type: ignore[arg-type]


@dataclass(frozen=True)
class Compare(_TermOps):
    """``attribute <comparator> value`` for received date, sent date or size."""

    attribute: CompareAttribute
    comparator: Comparator
    value: Union[date, int]


@dataclass(frozen=True)
class TextMatch(_TermOps):
    """Substring match on a text field; ``header`` names the header for HEADER."""

    field: TextField
    pattern: str
    header: Optional[str] = None


@dataclass(frozen=True)
class AddressMatch(_TermOps):
    """Match on a structured address; ``address`` holds the address spec."""

    field: TextField
    address: str


@dataclass(frozen=True)
class FlagState(_TermOps):
    """Every flag in ``flags`` is set (``expected`` true) or clear (false)."""

    flags: Flags
    expected: bool


@dataclass(frozen=True)
class MessageId(_TermOps):
    pattern: str


@dataclass(frozen=True)
class MessageNumber(_TermOps):
    number: int


@dataclass(frozen=True)
class ModifiedSince(_TermOps):
    """Messages whose mod-sequence is at least ``sequence`` (CONDSTORE)."""

    sequence: int


@dataclass(frozen=True)
class Age(_TermOps):
    """Messages older or younger than ``interval`` seconds (RFC 5032)."""

    comparator: AgeComparator
    interval: int


@dataclass(frozen=True)
class And(_TermOps):
    left: "Term"
    right: "Term"


@dataclass(frozen=True)
class Or(_TermOps):
    left: "Term"
    right: "Term"


@dataclass(frozen=True)
class Not(_TermOps):
    inner: "Term"


Term = Union[
    Compare,
    TextMatch,
    AddressMatch,
    FlagState,
    MessageId,
    MessageNumber,
    ModifiedSince,
    Age,
    And,
    Or,
    Not,
]


def and_(left: Term, right: Term) -> Term:
    """Return ``And(left, right)`` without flattening nested conjunctions."""

    return And(left, right)


def or_(left: Term, right: Term) -> Term:
    return Or(left, right)


def not_(term: Term) -> Term:
    """Negate ``term``, collapsing a double negation to the original term."""

    if isinstance(term, Not):
        return term.inner
    return Not(term)


def leaves(term: Term) -> Iterator[Term]:
    """Yield the non-combinator terms of a tree, left to right."""

    if isinstance(term, (And, Or)):
        yield from leaves(term.left)
        yield from leaves(term.right)
    elif isinstance(term, Not):
        yield from leaves(term.inner)
    else:
        yield term


def _bounds(lo, hi) -> Tuple[object, object]:
    if hi is not None:
        return lo, hi
    if isinstance(lo, range):
        return lo.start, lo.stop - 1
    low, high = lo
    return low, high


class _Comparison:
    """Comparison constructors for one :class:`CompareAttribute`."""

    attribute: CompareAttribute

    @classmethod
    def compare(cls, comparator: Comparator, value) -> Compare:
        return Compare(cls.attribute, Comparator(comparator), value)

    @classmethod
    def eq(cls, value) -> Compare:
        return cls.compare(Comparator.EQ, value)

    @classmethod
    def ne(cls, value) -> Compare:
        return cls.compare(Comparator.NE, value)

    @classmethod
    def lt(cls, value) -> Compare:
        return cls.compare(Comparator.LT, value)

    @classmethod
    def le(cls, value) -> Compare:
        return cls.compare(Comparator.LE, value)

    @classmethod
    def gt(cls, value) -> Compare:
        return cls.compare(Comparator.GT, value)

    @classmethod
    def ge(cls, value) -> Compare:
        return cls.compare(Comparator.GE, value)

    @classmethod
    def between(cls, lo, hi=None) -> Term:
        """Inclusive range ``lo <= value <= hi``.

        Accepts either two bounds or a single ``(lo, hi)`` pair. Both forms
        expand to ``And(ge(lo), le(hi))``; the bounds are not checked.
        """

        low, high = _bounds(lo, hi)
        return and_(cls.ge(low), cls.le(high))


class ReceivedDate(_Comparison):
    """Comparisons on the internal (arrival) date, e.g. ``ReceivedDate.ge(day)``."""

    attribute = CompareAttribute.RECEIVED_DATE


class SentDate(_Comparison):
    """Comparisons on the ``Date:`` header."""

    attribute = CompareAttribute.SENT_DATE


class Size(_Comparison):
    """Comparisons on the RFC822 size in octets.

    :meth:`between` additionally accepts a step-one ``range`` whose last
    element is the inclusive upper bound.
    """

    attribute = CompareAttribute.SIZE

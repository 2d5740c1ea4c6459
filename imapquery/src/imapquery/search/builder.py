"""Fluent accumulator for search terms, sort order and the mark-as-read directive.

What:
  :class:`SearchBuilder` is handed to a caller-supplied block by
  :func:`imapquery.core.executor.run_query`. The block adds terms, optionally
  configures a nested :class:`~imapquery.search.sort.SortBuilder`, and may ask
  for the matches to be flagged ``\\Seen``.

Why:
  Keeping configuration and execution apart means the block never touches the
  network: everything it does is recorded here and only
  :meth:`SearchBuilder.build` decides what predicate, if any, goes to the
  server.

How:
  Every ``foo(...)`` method returns a term without side effects and every
  ``with_foo(...)`` method appends that term and returns the builder so calls can
  be chained. :meth:`build` folds the recorded terms left to right with
  :func:`~imapquery.search.terms.and_`.

Interfaces:
  :class:`SearchBuilder`.

Invariants & Safety:
  - No terms means no predicate (``None``), never a match-everything search.
  - A single term is returned as is, not wrapped in a one-sided ``And``.
  - Term compatibility is never validated; the server is the judge.
"""
from __future__ import annotations

from datetime import date
from email.headerregistry import Address
from functools import reduce
from typing import Callable, Iterable, List, Optional, Union

from ..flags import FlagLike, Flags
from .sort import SortBuilder, SortKey
from .terms import (
    RECIPIENT_FIELDS,
    AddressMatch,
    Age,
    AgeComparator,
    Comparator,
    FlagState,
    MessageId,
    MessageNumber,
    ModifiedSince,
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

AddressLike = Union[Address, str]
SortBlock = Callable[[SortBuilder], None]


def _address_term(field: TextField, value: AddressLike) -> Term:
    if isinstance(value, Address):
        return AddressMatch(field, value.addr_spec)
    return TextMatch(field, value)


class SearchBuilder:
    """Collect the terms of one query."""

    def __init__(self) -> None:
        self._terms: List[Term] = []
        self._sort_keys: List[SortKey] = []
        self._mark_as_read = False

    # Accumulation ---------------------------------------------------------
    def add(self, term: Term) -> "SearchBuilder":
        self._terms.append(term)
        return self

    def add_negated(self, term: Term) -> "SearchBuilder":
        self._terms.append(not_(term))
        return self

    def mark_as_read(self, flag: bool = True) -> "SearchBuilder":
        """Flag every match ``\\Seen`` once the query has run (last call wins)."""

        self._mark_as_read = flag
        return self

    def sorted_by(self, block: SortBlock) -> "SearchBuilder":
        """Run ``block`` against a fresh :class:`SortBuilder` and keep its keys."""

        sort_builder = SortBuilder()
        block(sort_builder)
        self._sort_keys.extend(sort_builder.build())
        return self

    # Results --------------------------------------------------------------
    def build(self) -> Optional[Term]:
        """Return ``None``, the lone term, or the left-fold ``And`` of all terms."""

        if not self._terms:
            return None
        if len(self._terms) == 1:
            return self._terms[0]
        return reduce(and_, self._terms)

    @property
    def terms(self) -> List[Term]:
        return list(self._terms)

    @property
    def sort_keys(self) -> List[SortKey]:
        return list(self._sort_keys)

    def has_sort_keys(self) -> bool:
        return bool(self._sort_keys)

    @property
    def should_mark_as_read(self) -> bool:
        return self._mark_as_read

    # Addresses ------------------------------------------------------------
    def from_(self, value: AddressLike) -> Term:
        """Sender match; an :class:`~email.headerregistry.Address` matches exactly."""

        return _address_term(TextField.FROM, value)

    def with_from(self, value: AddressLike) -> "SearchBuilder":
        return self.add(self.from_(value))

    def recipient(self, field: TextField, value: AddressLike) -> Term:
        field = TextField(field)
        if field not in RECIPIENT_FIELDS:
            raise ValueError(f"{field.value!r} is not a recipient field")
        return _address_term(field, value)

    def with_recipient(self, field: TextField, value: AddressLike) -> "SearchBuilder":
        return self.add(self.recipient(field, value))

    def to(self, value: AddressLike) -> Term:
        return self.recipient(TextField.TO, value)

    def with_to(self, value: AddressLike) -> "SearchBuilder":
        return self.add(self.to(value))

    def cc(self, value: AddressLike) -> Term:
        return self.recipient(TextField.CC, value)

    def with_cc(self, value: AddressLike) -> "SearchBuilder":
        return self.add(self.cc(value))

    def bcc(self, value: AddressLike) -> Term:
        return self.recipient(TextField.BCC, value)

    def with_bcc(self, value: AddressLike) -> "SearchBuilder":
        return self.add(self.bcc(value))

    # Text -----------------------------------------------------------------
    def subject(self, pattern: str) -> Term:
        return TextMatch(TextField.SUBJECT, pattern)

    def with_subject(self, pattern: str) -> "SearchBuilder":
        return self.add(self.subject(pattern))

    def body(self, pattern: str) -> Term:
        return TextMatch(TextField.BODY, pattern)

    def with_body(self, pattern: str) -> "SearchBuilder":
        return self.add(self.body(pattern))

    def header(self, name: str, pattern: str) -> Term:
        return TextMatch(TextField.HEADER, pattern, header=name)

    def with_header(self, name: str, pattern: str) -> "SearchBuilder":
        return self.add(self.header(name, pattern))

    # Boolean --------------------------------------------------------------
    def or_(self, first: Term, second: Term) -> Term:
        return or_(first, second)

    def with_or(self, first: Term, second: Term) -> "SearchBuilder":
        return self.add(self.or_(first, second))

    def and_(self, first: Term, second: Term) -> Term:
        return and_(first, second)

    def with_and(self, first: Term, second: Term) -> "SearchBuilder":
        return self.add(self.and_(first, second))

    # Received date --------------------------------------------------------
    def received(self, comparator: Comparator, when: date) -> Term:
        return ReceivedDate.compare(comparator, when)

    def with_received(self, comparator: Comparator, when: date) -> "SearchBuilder":
        return self.add(self.received(comparator, when))

    def received_on(self, when: date) -> Term:
        return ReceivedDate.eq(when)

    def with_received_on(self, when: date) -> "SearchBuilder":
        return self.add(self.received_on(when))

    def received_on_or_after(self, when: date) -> Term:
        return ReceivedDate.ge(when)

    def with_received_on_or_after(self, when: date) -> "SearchBuilder":
        return self.add(self.received_on_or_after(when))

    def received_after(self, when: date) -> Term:
        return ReceivedDate.gt(when)

    def with_received_after(self, when: date) -> "SearchBuilder":
        return self.add(self.received_after(when))

    def received_on_or_before(self, when: date) -> Term:
        return ReceivedDate.le(when)

    def with_received_on_or_before(self, when: date) -> "SearchBuilder":
        return self.add(self.received_on_or_before(when))

    def received_before(self, when: date) -> Term:
        return ReceivedDate.lt(when)

    def with_received_before(self, when: date) -> "SearchBuilder":
        return self.add(self.received_before(when))

    def not_received_on(self, when: date) -> Term:
        return ReceivedDate.ne(when)

    def with_not_received_on(self, when: date) -> "SearchBuilder":
        return self.add(self.not_received_on(when))

    def received_between(self, earliest, latest: Optional[date] = None) -> Term:
        """Accepts ``(earliest, latest)`` or a single ``(earliest, latest)`` pair."""

        return ReceivedDate.between(earliest, latest)

    def with_received_between(self, earliest, latest: Optional[date] = None) -> "SearchBuilder":
        return self.add(self.received_between(earliest, latest))

    # Sent date ------------------------------------------------------------
    def sent(self, comparator: Comparator, when: date) -> Term:
        return SentDate.compare(comparator, when)

    def with_sent(self, comparator: Comparator, when: date) -> "SearchBuilder":
        return self.add(self.sent(comparator, when))

    def sent_on(self, when: date) -> Term:
        return SentDate.eq(when)

    def with_sent_on(self, when: date) -> "SearchBuilder":
        return self.add(self.sent_on(when))

    def sent_on_or_after(self, when: date) -> Term:
        return SentDate.ge(when)

    def with_sent_on_or_after(self, when: date) -> "SearchBuilder":
        return self.add(self.sent_on_or_after(when))

    def sent_after(self, when: date) -> Term:
        return SentDate.gt(when)

    def with_sent_after(self, when: date) -> "SearchBuilder":
        return self.add(self.sent_after(when))

    def sent_on_or_before(self, when: date) -> Term:
        return SentDate.le(when)

    def with_sent_on_or_before(self, when: date) -> "SearchBuilder":
        return self.add(self.sent_on_or_before(when))

    def sent_before(self, when: date) -> Term:
        return SentDate.lt(when)

    def with_sent_before(self, when: date) -> "SearchBuilder":
        return self.add(self.sent_before(when))

    def not_sent_on(self, when: date) -> Term:
        return SentDate.ne(when)

    def with_not_sent_on(self, when: date) -> "SearchBuilder":
        return self.add(self.not_sent_on(when))

    def sent_between(self, earliest, latest: Optional[date] = None) -> Term:
        return SentDate.between(earliest, latest)

    def with_sent_between(self, earliest, latest: Optional[date] = None) -> "SearchBuilder":
        return self.add(self.sent_between(earliest, latest))

    # Identity -------------------------------------------------------------
    def message_id(self, pattern: str) -> Term:
        return MessageId(pattern)

    def with_message_id(self, pattern: str) -> "SearchBuilder":
        return self.add(self.message_id(pattern))

    def message_number(self, number: int) -> Term:
        return MessageNumber(number)

    def with_message_number(self, number: int) -> "SearchBuilder":
        return self.add(self.message_number(number))

    # Size -----------------------------------------------------------------
    def size(self, comparator: Comparator, octets: int) -> Term:
        return Size.compare(comparator, octets)

    def with_size(self, comparator: Comparator, octets: int) -> "SearchBuilder":
        return self.add(self.size(comparator, octets))

    def size_is(self, octets: int) -> Term:
        return Size.eq(octets)

    def with_size_is(self, octets: int) -> "SearchBuilder":
        return self.add(self.size_is(octets))

    def size_is_at_least(self, octets: int) -> Term:
        return Size.ge(octets)

    def with_size_is_at_least(self, octets: int) -> "SearchBuilder":
        return self.add(self.size_is_at_least(octets))

    def size_is_greater_than(self, octets: int) -> Term:
        return Size.gt(octets)

    def with_size_is_greater_than(self, octets: int) -> "SearchBuilder":
        return self.add(self.size_is_greater_than(octets))

    def size_is_no_more_than(self, octets: int) -> Term:
        return Size.le(octets)

    def with_size_is_no_more_than(self, octets: int) -> "SearchBuilder":
        return self.add(self.size_is_no_more_than(octets))

    def size_is_less_than(self, octets: int) -> Term:
        return Size.lt(octets)

    def with_size_is_less_than(self, octets: int) -> "SearchBuilder":
        return self.add(self.size_is_less_than(octets))

    def size_is_not(self, octets: int) -> Term:
        return Size.ne(octets)

    def with_size_is_not(self, octets: int) -> "SearchBuilder":
        return self.add(self.size_is_not(octets))

    def size_between(self, smallest, largest: Optional[int] = None) -> Term:
        """Accepts two bounds, a ``(smallest, largest)`` pair or a step-one ``range``."""

        return Size.between(smallest, largest)

    def with_size_between(self, smallest, largest: Optional[int] = None) -> "SearchBuilder":
        return self.add(self.size_between(smallest, largest))

    # Flags, mod-sequence and age -------------------------------------------
    def flags(self, flags: Union[Flags, FlagLike, Iterable[FlagLike]], is_set: bool) -> Term:
        return FlagState(Flags.of(flags), is_set)

    def with_flags(
        self, flags: Union[Flags, FlagLike, Iterable[FlagLike]], is_set: bool
    ) -> "SearchBuilder":
        return self.add(self.flags(flags, is_set))

    def modified_since(self, sequence: int) -> Term:
        return ModifiedSince(sequence)

    def with_modified_since(self, sequence: int) -> "SearchBuilder":
        return self.add(self.modified_since(sequence))

    def older(self, interval: int) -> Term:
        """Messages that arrived more than ``interval`` seconds ago."""

        return Age(AgeComparator.OLDER, interval)

    def with_older(self, interval: int) -> "SearchBuilder":
        return self.add(self.older(interval))

    def younger(self, interval: int) -> Term:
        return Age(AgeComparator.YOUNGER, interval)

    def with_younger(self, interval: int) -> "SearchBuilder":
        return self.add(self.younger(interval))

"""
Module: tests/unit/test_criteria.py

What:
    Check the translation from term trees to ``imapclient`` criteria lists and
    from sort keys to RFC 5256 sort criteria.

Why:
    IMAP has no direct spelling for several comparisons; the expansions chosen
    here decide which messages a query returns.

How:
    Translate individual terms and compare with literal criteria lists.
"""

from datetime import date

import pytest
from imapclient.imapclient import _normalise_search_criteria

from imapquery.flags import Flag, Flags
from imapquery.search.builder import SearchBuilder
from imapquery.search.criteria import to_criteria, to_sort_criteria
from imapquery.search.sort import SortKey
from imapquery.search.terms import (
    AddressMatch,
    Age,
    AgeComparator,
    FlagState,
    MessageId,
    MessageNumber,
    ModifiedSince,
    ReceivedDate,
    SentDate,
    Size,
    TextField,
    TextMatch,
)

DAY = date(2024, 3, 1)


@pytest.mark.parametrize(
    "term, expected",
    [
        (ReceivedDate.eq(DAY), ["ON", DAY]),
        (ReceivedDate.ne(DAY), ["NOT", ["ON", DAY]]),
        (ReceivedDate.lt(DAY), ["BEFORE", DAY]),
        (ReceivedDate.ge(DAY), ["SINCE", DAY]),
        (ReceivedDate.le(DAY), ["OR", ["BEFORE", DAY], ["ON", DAY]]),
        (ReceivedDate.gt(DAY), ["SINCE", DAY, "NOT", ["ON", DAY]]),
        (SentDate.eq(DAY), ["SENTON", DAY]),
        (SentDate.le(DAY), ["OR", ["SENTBEFORE", DAY], ["SENTON", DAY]]),
        (SentDate.gt(DAY), ["SENTSINCE", DAY, "NOT", ["SENTON", DAY]]),
    ],
)
def test_date_comparisons(term, expected):
    assert to_criteria(term) == expected


@pytest.mark.parametrize(
    "term, expected",
    [
        (Size.gt(100), ["LARGER", 100]),
        (Size.lt(100), ["SMALLER", 100]),
        (Size.ge(100), ["NOT", ["SMALLER", 100]]),
        (Size.le(100), ["NOT", ["LARGER", 100]]),
        (Size.eq(100), ["NOT", ["LARGER", 100], "NOT", ["SMALLER", 100]]),
        (Size.ne(100), ["OR", ["LARGER", 100], ["SMALLER", 100]]),
    ],
)
def test_size_comparisons(term, expected):
    assert to_criteria(term) == expected


def test_text_and_identity_terms():
    assert to_criteria(TextMatch(TextField.BODY, "lunch")) == ["BODY", "lunch"]
    assert to_criteria(TextMatch(TextField.HEADER, "yes", header="X-Spam")) == [
        "HEADER",
        "X-Spam",
        "yes",
    ]
    assert to_criteria(AddressMatch(TextField.CC, "c@x.org")) == ["CC", "c@x.org"]
    assert to_criteria(MessageId("<id@x>")) == ["HEADER", "Message-ID", "<id@x>"]
    assert to_criteria(MessageNumber(4)) == [4]
    assert to_criteria(ModifiedSince(99)) == ["MODSEQ", 99]
    assert to_criteria(Age(AgeComparator.YOUNGER, 60)) == ["YOUNGER", 60]


def test_flag_states():
    assert to_criteria(FlagState(Flags(Flag.SEEN), True)) == ["SEEN"]
    assert to_criteria(FlagState(Flags(Flag.SEEN, Flag.FLAGGED), False)) == [
        "UNFLAGGED",
        "UNSEEN",
    ]
    assert to_criteria(FlagState(Flags(Flag.RECENT), False)) == ["OLD"]
    assert to_criteria(FlagState(Flags("$Work"), False)) == ["UNKEYWORD", "$Work"]
    assert to_criteria(FlagState(Flags(), True)) == ["ALL"]


def test_combinators_keep_tree_shape():
    builder = SearchBuilder()
    builder.with_from("a@x.com").with_sent_on_or_before(DAY)
    assert to_criteria(builder.build()) == [
        ["FROM", "a@x.com"],
        ["OR", ["SENTBEFORE", DAY], ["SENTON", DAY]],
    ]
    either = builder.or_(builder.subject("a"), ~builder.subject("b"))
    assert to_criteria(either) == ["OR", ["SUBJECT", "a"], ["NOT", ["SUBJECT", "b"]]]


def test_unknown_term_is_rejected():
    with pytest.raises(TypeError):
        to_criteria("SUBJECT hello")  # type: ignore[arg-type]


def test_sort_criteria_preserve_reverse_position():
    keys = [SortKey.SUBJECT, SortKey.REVERSE, SortKey.SENT]
    assert to_sort_criteria(keys) == ["SUBJECT", "REVERSE", "DATE"]
    assert to_sort_criteria([]) == []


def test_charset_encodes_patterns_at_every_depth():
    """
    What:
        With a charset, text and address patterns become ``bytes`` wherever
        they sit in the tree, so ``imapclient`` serialises non-ASCII queries.

    Why:
        ``imapclient`` encodes nested criteria lists as US-ASCII; a two-term
        query with an accented subject would otherwise fail before sending.

    How:
        Translate a conjunction and a disjunction with ``UTF-8`` and run the
        result through ``imapclient``'s own criteria normaliser.
    """
    builder = SearchBuilder().with_subject("café").with_size_is_less_than(100)
    criteria = to_criteria(builder.build(), "UTF-8")
    assert criteria == [["SUBJECT", "café".encode("utf-8")], ["SMALLER", 100]]
    wire = _normalise_search_criteria(criteria, "UTF-8")
    assert wire == [b"(SUBJECT", "café)".encode("utf-8"), b"(SMALLER", b"100)"]

    either = builder.or_(builder.from_("zoë@example.com"), ~builder.header("X-Tag", "Grüße"))
    wire = b" ".join(_normalise_search_criteria(to_criteria(either, "UTF-8"), "UTF-8"))
    assert "zoë@example.com".encode("utf-8") in wire
    assert "Grüße".encode("utf-8") in wire


def test_without_charset_patterns_stay_text():
    assert to_criteria(TextMatch(TextField.SUBJECT, "café")) == ["SUBJECT", "café"]

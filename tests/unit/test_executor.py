"""
Module: tests/unit/test_executor.py

What:
    Verify the strategy selection and call sequence of :func:`run_query`
    against a recording :class:`FakeFolderHandle`.

Why:
    The executor owns the rules that matter for correctness and cost: exactly
    one retrieval operation, exactly one fetch for the whole result, mark-as-read
    issued once after mapping, and nothing at all for an empty query.

How:
    Feed query blocks to :func:`run_query` and assert on the handle's recorded
    calls and on the returned messages.
"""

import io
import json
from datetime import date

import pytest
from imapclient.exceptions import IMAPClientError

from fakes import FakeFolderHandle
from imapquery.core.executor import Strategy, run_query, select_strategy
from imapquery.flags import Flag
from imapquery.imap.fetch import FetchItem, FetchProfile
from imapquery.search.sort import SortKey
from imapquery.search.terms import And, SentDate, TextField, TextMatch
from imapquery.utils.logging import JsonLogger

DAY = date(2024, 3, 1)


def _quiet_logger():
    return JsonLogger(stream=io.StringIO(), component="test")


@pytest.mark.parametrize(
    "predicate, order, expected",
    [
        (None, [], Strategy.NONE),
        (None, [SortKey.SIZE], Strategy.SORT),
        (TextMatch(TextField.FROM, "a"), [], Strategy.SEARCH),
        (TextMatch(TextField.FROM, "a"), [SortKey.SIZE], Strategy.SORTED_SEARCH),
    ],
)
def test_select_strategy(predicate, order, expected):
    assert select_strategy(predicate, order) is expected


def test_search_then_single_fetch():
    """
    What:
        A two-term query matching three messages issues one search and one
        fetch covering all three, and returns them in server order.

    Why:
        Per-message fetches would multiply round trips; the batching rule is
        the main performance guarantee of the executor.

    How:
        Run the query against a handle returning UIDs 7, 3, 9 and inspect the
        call log.
    """
    handle = FakeFolderHandle([7, 3, 9])
    messages = run_query(
        handle,
        lambda q: q.with_from("a@x.com").with_sent_on_or_before(DAY),
        logger=_quiet_logger(),
    )

    assert [message.uid for message in messages] == [7, 3, 9]
    assert handle.methods == ["search", "fetch"]
    (predicate,) = handle.calls[0][1]
    assert predicate == And(TextMatch(TextField.FROM, "a@x.com"), SentDate.le(DAY))
    assert handle.calls[1][1] == ([7, 3, 9], handle.fetch_profile)


def test_explicit_profile_overrides_folder_default():
    handle = FakeFolderHandle([1])
    profile = FetchProfile(FetchItem.BODY)
    run_query(handle, lambda q: q.with_subject("x"), profile=profile, logger=_quiet_logger())
    assert handle.calls[-1] == ("fetch", ([1], profile))


def test_sorted_search_passes_keys_in_order():
    handle = FakeFolderHandle([2, 1])

    def block(query):
        query.with_subject("report")
        query.sorted_by(lambda order: (order.negate(SortKey.ARRIVAL), order.add(SortKey.FROM)))

    messages = run_query(handle, block, logger=_quiet_logger())
    assert [message.uid for message in messages] == [2, 1]
    assert handle.methods == ["search_sorted", "fetch"]
    assert handle.calls[0][1][1] == [SortKey.REVERSE, SortKey.ARRIVAL, SortKey.FROM]


def test_sort_only_when_no_terms():
    handle = FakeFolderHandle([5, 4])
    run_query(handle, lambda q: q.sorted_by(lambda order: order.add(SortKey.SIZE)), logger=_quiet_logger())
    assert handle.methods == ["sort_only", "fetch"]
    assert handle.calls[0][1] == ([SortKey.SIZE],)


def test_empty_query_touches_nothing():
    handle = FakeFolderHandle([1, 2, 3])
    assert run_query(handle, lambda q: None, logger=_quiet_logger()) == []
    assert handle.calls == []


def test_mark_as_read_is_one_batched_call_after_fetch():
    handle = FakeFolderHandle([10, 11, 12])
    run_query(handle, lambda q: q.with_subject("x").mark_as_read(), logger=_quiet_logger())
    assert handle.methods == ["search", "fetch", "set_flag"]
    assert handle.calls[-1][1] == ([10, 11, 12], Flag.SEEN, True)


def test_mark_as_read_skipped_without_matches():
    handle = FakeFolderHandle([])
    assert run_query(handle, lambda q: q.with_subject("x").mark_as_read(), logger=_quiet_logger()) == []
    assert handle.methods == ["search", "fetch"]


def test_fetched_data_reaches_messages():
    raw = b"From: Alice <alice@example.com>\r\nSubject: hi\r\n\r\nbody\r\n"
    handle = FakeFolderHandle([3], responses={3: {b"BODY[]": raw}})
    (message,) = run_query(handle, lambda q: q.with_subject("hi"), logger=_quiet_logger())
    assert message.from_ == "Alice <alice@example.com>"
    assert message.body_text.strip() == "body"


@pytest.mark.parametrize("failing", ["search", "fetch", "set_flag"])
def test_handle_errors_propagate(failing):
    handle = FakeFolderHandle([1], fail_on=[failing])
    with pytest.raises(IMAPClientError):
        run_query(handle, lambda q: q.with_subject("x").mark_as_read(), logger=_quiet_logger())


def test_logs_structured_events_without_patterns():
    stream = io.StringIO()
    handle = FakeFolderHandle([1, 2])
    run_query(
        handle,
        lambda q: q.with_subject("secret plans"),
        logger=JsonLogger(stream=stream, component="test"),
    )
    records = [json.loads(line) for line in stream.getvalue().splitlines()]
    assert [record["msg"] for record in records] == ["query_started", "query_completed"]
    assert records[1]["count"] == 2
    assert records[1]["marked_read"] is False
    assert "secret plans" not in stream.getvalue()

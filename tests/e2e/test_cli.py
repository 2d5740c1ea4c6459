"""End-to-end tests for the ``imapquery`` command line.

What:
  Invoke the Typer application through :class:`typer.testing.CliRunner` with
  the IMAP wire replaced by the in-memory :class:`FakeImapBackend`, and check
  printed results, exit codes and the commands that reached the backend.

Why:
  The CLI is the operator-facing surface. These tests ensure option parsing,
  configuration bootstrapping, folder modes and error handling line up with
  the library behaviour.

How:
  Seed a fake mailbox, monkeypatch ``imapquery.imap.client.IMAPClient`` and
  run commands. Log records share the output stream, so result lines are
  picked out by their ``uid`` key.

Invariants & Safety:
  - Commands must succeed without requiring external network access.
"""

import json
import sys
from datetime import datetime, timezone
from pathlib import Path

import imapclient
import pytest
from typer.testing import CliRunner

UNIT_DIR = Path(__file__).resolve().parents[1] / "unit"
if str(UNIT_DIR) not in sys.path:
    sys.path.insert(0, str(UNIT_DIR))

from fakes import FakeImapBackend, make_message
from imapquery.cli import app

runner = CliRunner()


@pytest.fixture
def backend(monkeypatch: pytest.MonkeyPatch):
    fake = FakeImapBackend()
    fake.append(
        "INBOX",
        make_message("Alice <alice@example.com>", "Quarterly report", "numbers"),
        msg_time=datetime(2024, 3, 1, 8, tzinfo=timezone.utc),
    )
    fake.append(
        "INBOX",
        make_message("Bob <bob@example.com>", "Lunch?", "pizza"),
        flags=[imapclient.SEEN],
        msg_time=datetime(2024, 3, 5, 8, tzinfo=timezone.utc),
    )
    fake.append(
        "INBOX",
        make_message("Alice <alice@example.com>", "Re: Quarterly report", "thanks"),
        msg_time=datetime(2024, 3, 9, 8, tzinfo=timezone.utc),
    )
    monkeypatch.setattr("imapquery.imap.client.IMAPClient", lambda host, port, ssl: fake)
    return fake


def _results(output: str):
    records = [json.loads(line) for line in output.splitlines() if line.startswith("{")]
    return [record for record in records if "uid" in record]


def test_search_by_sender(backend):
    result = runner.invoke(app, ["search", "--from", "alice@example.com"])
    assert result.exit_code == 0, result.output
    assert _results(result.output) == [
        {"uid": 1, "from": "Alice <alice@example.com>"},
        {"uid": 3, "from": "Alice <alice@example.com>"},
    ]
    assert backend.calls_to("select_folder") == [("INBOX", True)]
    assert backend.calls_to("add_flags") == []


def test_search_sorted_newest_first(backend):
    result = runner.invoke(app, ["search", "--since", "2024-03-02", "--sort", "-arrival"])
    assert result.exit_code == 0, result.output
    assert [record["uid"] for record in _results(result.output)] == [3, 2]


def test_unseen_mark_read_opens_read_write(backend):
    result = runner.invoke(app, ["search", "--unseen", "--mark-read", "--folder", "INBOX"])
    assert result.exit_code == 0, result.output
    assert [record["uid"] for record in _results(result.output)] == [1, 3]
    assert backend.calls_to("select_folder") == [("INBOX", False)]
    assert backend.calls_to("add_flags") == [([1, 3], [imapclient.SEEN])]


def test_search_without_criteria_sends_nothing(backend):
    result = runner.invoke(app, ["search"])
    assert result.exit_code == 0, result.output
    assert _results(result.output) == []
    assert backend.calls_to("search") == []
    assert backend.calls_to("sort") == []


def test_count(backend):
    result = runner.invoke(app, ["count"])
    assert result.exit_code == 0, result.output
    (payload,) = [
        json.loads(line) for line in result.output.splitlines() if line.startswith('{"folder"')
    ]
    assert payload == {"folder": "INBOX", "messages": 3, "unread": 2, "new": 0}


def test_imap_failure_exits_with_code_one(backend):
    backend.fail_on.add("search")
    result = runner.invoke(app, ["search", "--subject", "Lunch"])
    assert result.exit_code == 1
    assert _results(result.output) == []


def test_missing_config_exits_with_code_one(tmp_path):
    result = runner.invoke(app, ["count", "--config", str(tmp_path / "nope.yaml")])
    assert result.exit_code == 1

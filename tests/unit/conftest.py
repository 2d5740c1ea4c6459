"""Pytest fixtures for unit tests requiring IMAP fakes.

What:
  Make ``tests/unit`` importable and expose an ``imap_session`` fixture backed
  by :class:`FakeImapBackend`.

Why:
  Folder and message tests drive the real :class:`ImapQueryClient` and
  :class:`Folder` code; only the wire is replaced.

How:
  Monkeypatch ``imapquery.imap.client.IMAPClient`` to return the fake backend,
  build an :class:`ImapConfig` with dummy credentials, and yield the connected
  session together with the backend for assertions.

Interfaces:
  :func:`imap_session` (pytest fixture).
"""

import sys
from pathlib import Path

import pytest

from imapquery.imap.client import ImapConfig, ImapQueryClient

UNIT_DIR = Path(__file__).resolve().parent
if str(UNIT_DIR) not in sys.path:
    sys.path.insert(0, str(UNIT_DIR))

from fakes import FakeImapBackend


@pytest.fixture
def imap_session(monkeypatch: pytest.MonkeyPatch):
    """Yield ``(ImapQueryClient, FakeImapBackend)`` inside the client context."""

    backend = FakeImapBackend()
    monkeypatch.setattr("imapquery.imap.client.IMAPClient", lambda host, port, ssl: backend)
    config = ImapConfig(host="localhost", username="user", password="pass")
    with ImapQueryClient(config) as session:
        yield session, backend

"""Exception hierarchy shared by the imapquery packages.

What:
  Define the named error conditions raised by imapquery itself, as opposed to
  the protocol errors raised by ``imapclient`` which are always propagated
  unchanged.

Why:
  Callers must be able to tell a stale message read apart from a network or
  server failure. A small, explicit hierarchy keeps ``except`` clauses precise.

How:
  Every error derives from :class:`ImapQueryError`. Configuration failures live
  in :mod:`imapquery.config.loader` and subclass the same base.

Interfaces:
  :class:`ImapQueryError`, :class:`MessageDetachedError`,
  :class:`FolderClosedError`, :class:`RateLimitExceeded`.
"""
from __future__ import annotations


class ImapQueryError(Exception):
    """Base class for every error raised by imapquery."""


class FolderClosedError(ImapQueryError):
    """Raised when a folder handle is used after :meth:`Folder.close`."""

    def __init__(self, folder: str) -> None:
        super().__init__(f"Folder {folder!r} is closed")
        self.folder = folder


class MessageDetachedError(ImapQueryError):
    """Raised when reading an attribute that was never fetched from a closed folder.

    What:
      Signals that ``attribute`` of the message identified by ``uid`` is no
      longer reachable because its owning folder has been closed.

    Why:
      Returning an empty string or ``None`` would silently hide a missing
      pre-fetch. The error names the attribute so the caller can add the
      corresponding :class:`~imapquery.imap.fetch.FetchItem` to its profile.
    """

    def __init__(self, uid: int, attribute: str) -> None:
        super().__init__(
            f"Message {uid} is detached from its folder; {attribute!r} was not pre-fetched"
        )
        self.uid = uid
        self.attribute = attribute


class RateLimitExceeded(ImapQueryError):
    """Raised when mutating IMAP commands exceed the per-minute budget."""

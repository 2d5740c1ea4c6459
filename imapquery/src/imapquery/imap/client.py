"""Stateful IMAP session that hands out folder handles.

What:
  Wrap the third-party ``imapclient`` library with configuration defaults, a
  login/logout context manager, a rate limiter for mutating commands and a
  :meth:`ImapQueryClient.folder` context manager that opens a mailbox and
  always closes it again.

Why:
  Messages can only load attributes lazily while their folder is open. Tying
  the folder lifetime to a ``with`` block makes that scope explicit, and
  routing every flag mutation through one limiter keeps bulk mark-as-read
  queries from tripping provider throttles.

How:
  :class:`ImapConfig` fills unset fields from the runtime configuration (and
  the password from ``IMAPQUERY_PASSWORD``). :meth:`ImapQueryClient.__enter__`
  connects and logs in; :meth:`ImapQueryClient.folder` selects the mailbox in
  the requested mode and yields a :class:`~imapquery.imap.folder.Folder`.

Interfaces:
  :class:`ImapConfig`, :class:`ImapQueryClient`.

Invariants & Safety:
  - All searches run in UID mode (the ``imapclient`` default).
  - A folder opened through :meth:`ImapQueryClient.folder` is closed without
    expunge when the block exits, even on error.
  - More than ``rate_limit_per_minute`` mutating commands within sixty seconds
    raise :class:`~imapquery.errors.RateLimitExceeded`.
"""
from __future__ import annotations

import contextlib
import os
import time
from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterator, List, Optional

from imapclient import IMAPClient

from ..config.loader import get_runtime_config
from ..config.schema import RuntimeConfig
from ..errors import RateLimitExceeded
from ..utils.logging import JsonLogger, get_logger
from .fetch import FetchProfile
from .folder import Folder, FolderMode

_PASSWORD_ENV = "IMAPQUERY_PASSWORD"


@dataclass
class ImapConfig:
    """Connection parameters and query defaults for one IMAP account.

    Attributes:
      host: IMAP hostname.
      username: Login credential.
      password: Password or app token; falls back to ``IMAPQUERY_PASSWORD``
        and then to the runtime configuration.
      port: IMAP port.
      ssl: Whether to use TLS.
      folder: Mailbox opened when :meth:`ImapQueryClient.folder` gets no name.
      charset: Charset declared for SEARCH and SORT criteria.
      prefetch: Names of the fetch items pre-fetched for query results.
      rate_limit_per_minute: Budget for mutating commands.
    """

    host: str
    username: str
    password: Optional[str] = None
    port: int = 993
    ssl: bool = True
    folder: Optional[str] = None
    charset: Optional[str] = None
    prefetch: Optional[List[str]] = None
    rate_limit_per_minute: Optional[int] = None

    def __post_init__(self) -> None:
        if self.password is None:
            self.password = os.environ.get(_PASSWORD_ENV)
        if None in (
            self.password,
            self.folder,
            self.charset,
            self.prefetch,
            self.rate_limit_per_minute,
        ):
            settings = get_runtime_config()
            if self.password is None:
                self.password = settings.imap.password
            if self.folder is None:
                self.folder = settings.imap.default_mailbox
            if self.charset is None:
                self.charset = settings.imap.charset
            if self.prefetch is None:
                self.prefetch = list(settings.query.prefetch)
            if self.rate_limit_per_minute is None:
                self.rate_limit_per_minute = settings.query.rate_limit_per_minute

    @classmethod
    def from_runtime(cls, settings: RuntimeConfig) -> "ImapConfig":
        """Build a configuration entirely from a loaded :class:`RuntimeConfig`."""

        imap = settings.imap
        return cls(
            host=imap.host,
            username=imap.username,
            password=imap.password or os.environ.get(_PASSWORD_ENV) or "",
            port=imap.port,
            ssl=imap.ssl,
            folder=imap.default_mailbox,
            charset=imap.charset,
            prefetch=list(settings.query.prefetch),
            rate_limit_per_minute=settings.query.rate_limit_per_minute,
        )


class ImapQueryClient:
    """Context manager owning one ``IMAPClient`` connection.

    Usage::

        with ImapQueryClient(config) as store:
            with store.folder("INBOX", FolderMode.READ_WRITE) as inbox:
                unread = inbox.query(lambda q: q.with_flags(Flag.SEEN, False))
    """

    def __init__(self, config: ImapConfig, *, logger: Optional[JsonLogger] = None):
        self._config = config
        self._client: Optional[IMAPClient] = None
        self._actions: Deque[float] = deque()
        self._logger = logger or get_logger("imapquery.imap")

    def __enter__(self) -> "ImapQueryClient":
        self._client = IMAPClient(self._config.host, port=self._config.port, ssl=self._config.ssl)
        self._client.login(self._config.username, self._config.password or "")
        self._logger.info("imap_connected", host=self._config.host, user=self._config.username)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._client is None:
            return
        try:
            self._client.logout()
        finally:
            self._client = None

    @property
    def client(self) -> IMAPClient:
        """The underlying ``IMAPClient``; raises when not connected."""

        if self._client is None:
            raise RuntimeError("IMAP client not connected")
        return self._client

    @property
    def config(self) -> ImapConfig:
        return self._config

    def throttle(self) -> None:
        """Record one mutating command, failing once the per-minute budget is spent."""

        limit = self._config.rate_limit_per_minute or 500
        now = time.monotonic()
        while self._actions and now - self._actions[0] > 60:
            self._actions.popleft()
        if len(self._actions) >= limit:
            raise RateLimitExceeded(f"IMAP action rate limit exceeded ({limit}/min)")
        self._actions.append(now)

    def open_folder(self, name: Optional[str] = None, mode: FolderMode = FolderMode.READ_ONLY) -> Folder:
        """Select ``name`` and return an open :class:`Folder`; the caller must close it."""

        mailbox = name or self._config.folder or "INBOX"
        self.client.select_folder(mailbox, readonly=mode is FolderMode.READ_ONLY)
        return Folder(
            self,
            mailbox,
            mode,
            fetch_profile=FetchProfile.from_names(self._config.prefetch or ()),
            charset=self._config.charset or "UTF-8",
            logger=self._logger,
        )

    @contextlib.contextmanager
    def folder(
        self, name: Optional[str] = None, mode: FolderMode = FolderMode.READ_ONLY
    ) -> Iterator[Folder]:
        """Open ``name`` for the duration of the ``with`` block."""

        opened = self.open_folder(name, mode)
        try:
            yield opened
        finally:
            opened.close(expunge=False)

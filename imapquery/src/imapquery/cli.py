"""imapquery command-line interface.

What:
  Provide a Typer-based entry point exposing the ``search`` and ``count``
  commands so mailbox queries can be run from cron jobs or shells without
  writing Python.

Why:
  Operators frequently need a one-off answer ("which unread messages from this
  sender arrived since Monday?") or a scripted one. Mapping command-line
  options onto the same :class:`~imapquery.search.builder.SearchBuilder` calls
  used by library code keeps both paths behaving identically.

How:
  Load the runtime configuration, open an :class:`ImapQueryClient` session and
  the requested folder, translate options into builder calls inside a query
  block and print one JSON object per match. Every attribute printed is read
  while the folder is still open.

Interfaces:
  ``app`` (Typer application), ``search``, ``count``.

Invariants & Safety:
  - Exit codes follow shell expectations (``0`` success, ``1`` failure).
  - Folders are opened read-only unless ``--mark-read`` is given.
  - Search patterns never reach the logs; the structured logger redacts them.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import typer
from imapclient.exceptions import IMAPClientError

from .config.loader import load_runtime_config
from .errors import ImapQueryError
from .flags import Flag
from .imap.client import ImapConfig, ImapQueryClient
from .imap.fetch import FetchItem
from .imap.folder import FolderMode
from .search.builder import SearchBuilder
from .search.sort import SortBuilder
from .utils.logging import get_logger

app = typer.Typer(help="Query IMAP mailboxes from the command line")

LOGGER = logging.getLogger("imapquery.cli")

_DATE_FORMATS = ["%Y-%m-%d"]


def _connect(config_path: Optional[Path]) -> ImapQueryClient:
    runtime = load_runtime_config(config_path)
    logger = get_logger(runtime.logging.component, redact=runtime.logging.redact)
    return ImapQueryClient(ImapConfig.from_runtime(runtime), logger=logger)


def _apply_sort(sort_builder: SortBuilder, keys: str) -> None:
    """Feed a comma separated key list such as ``-arrival,subject`` to ``sort_builder``."""

    for token in keys.split(","):
        token = token.strip()
        if not token:
            continue
        if token.startswith("-"):
            sort_builder.negate(token[1:])
        else:
            sort_builder.add(token)


@app.command("search")
def search(
    *,
    config_path: Optional[Path] = typer.Option(None, "--config", help="Path to config.yaml"),
    folder: Optional[str] = typer.Option(None, help="Mailbox to search (defaults to the configured one)"),
    sender: Optional[str] = typer.Option(None, "--from", help="Sender substring"),
    recipient: Optional[str] = typer.Option(None, "--to", help="Recipient substring"),
    subject: Optional[str] = typer.Option(None, help="Subject substring"),
    body: Optional[str] = typer.Option(None, help="Body substring"),
    since: Optional[datetime] = typer.Option(None, formats=_DATE_FORMATS, help="Received on or after"),
    before: Optional[datetime] = typer.Option(None, formats=_DATE_FORMATS, help="Received before"),
    larger: Optional[int] = typer.Option(None, help="Size greater than this many octets"),
    smaller: Optional[int] = typer.Option(None, help="Size less than this many octets"),
    unseen: bool = typer.Option(False, "--unseen", help="Only messages without \\Seen"),
    sort: Optional[str] = typer.Option(None, help="Comma separated sort keys; prefix '-' to reverse"),
    mark_read: bool = typer.Option(False, "--mark-read", help="Flag every match as \\Seen"),
) -> None:
    """Print matching messages as JSON lines with ``uid`` and ``from``.

    Options are combined with AND. Without any criterion and without ``--sort``
    nothing is sent to the server and nothing is printed.
    """

    def block(query: SearchBuilder) -> None:
        if sender:
            query.with_from(sender)
        if recipient:
            query.with_to(recipient)
        if subject:
            query.with_subject(subject)
        if body:
            query.with_body(body)
        if since is not None:
            query.with_received_on_or_after(since.date())
        if before is not None:
            query.with_received_before(before.date())
        if larger is not None:
            query.with_size_is_greater_than(larger)
        if smaller is not None:
            query.with_size_is_less_than(smaller)
        if unseen:
            query.with_flags(Flag.SEEN, False)
        if sort:
            query.sorted_by(lambda order: _apply_sort(order, sort))
        if mark_read:
            query.mark_as_read()

    mode = FolderMode.READ_WRITE if mark_read else FolderMode.READ_ONLY
    lines: List[str] = []
    try:
        with _connect(config_path) as session:
            with session.folder(folder, mode) as mailbox:
                profile = mailbox.fetch_profile.add(FetchItem.ENVELOPE)
                for message in mailbox.query(block, profile=profile):
                    lines.append(json.dumps({"uid": message.uid, "from": message.from_}))
    except (ImapQueryError, IMAPClientError, OSError) as exc:
        LOGGER.exception("search_failed: %s", exc)
        raise typer.Exit(code=1) from exc

    for line in lines:
        typer.echo(line)


@app.command("count")
def count(
    *,
    config_path: Optional[Path] = typer.Option(None, "--config", help="Path to config.yaml"),
    folder: Optional[str] = typer.Option(None, help="Mailbox to inspect"),
) -> None:
    """Print the total, unread and new message counts of a folder."""

    try:
        with _connect(config_path) as session:
            with session.folder(folder) as mailbox:
                payload = {
                    "folder": mailbox.name,
                    "messages": mailbox.message_count,
                    "unread": mailbox.unread_message_count,
                    "new": mailbox.new_message_count,
                }
    except (ImapQueryError, IMAPClientError, OSError) as exc:
        LOGGER.exception("count_failed: %s", exc)
        raise typer.Exit(code=1) from exc

    typer.echo(json.dumps(payload))


if __name__ == "__main__":
    app()

"""MIME helpers turning fetched IMAP payloads into message attributes.

What:
  Parse ``BODY[]`` and ``BODY[HEADER]`` fetch results into an ordered header
  list, the sender string and a text body.

Why:
  Messages may be fetched whole or header-only depending on the active fetch
  profile. The projection in :mod:`imapquery.imap.message` should not care
  which of the two it received.

How:
  Use the ``email`` package's :class:`~email.parser.BytesParser` with the
  default policy. The text body is the first ``text/*`` leaf in a depth-first
  walk, decoded with the declared charset or UTF-8. A charset Python has no
  codec for falls back to UTF-8 with replacement characters.

Interfaces:
  :func:`parse_message`, :func:`parse_headers`, :func:`extract_body_text`.
"""
from __future__ import annotations

from email import policy
from email.message import EmailMessage
from email.parser import BytesParser
from typing import List, Tuple


def parse_message(raw: bytes) -> EmailMessage:
    """Parse a complete RFC822 payload."""

    return BytesParser(policy=policy.default).parsebytes(raw)


def parse_headers(raw: bytes) -> List[Tuple[str, str]]:
    """Return ``(name, value)`` pairs in wire order from a header block or full message."""

    message = BytesParser(policy=policy.default).parsebytes(raw, headersonly=True)
    return [(name, str(value)) for name, value in message.items()]


def extract_body_text(message: EmailMessage) -> str:
    """Select the first textual part of ``message``; empty when none exists."""

    if message.is_multipart():
        for part in message.walk():
            if part.is_multipart():
                continue
            if part.get_content_type().startswith("text/"):
                return _decode(part)
        return ""
    return _decode(message)


def _decode(part: EmailMessage) -> str:
    try:
        payload = part.get_content()
    except LookupError:
        # charset unknown to Python codecs
        raw = part.get_payload(decode=True) or b""
        return raw.decode("utf-8", errors="replace")
    if isinstance(payload, bytes):
        payload = payload.decode(part.get_content_charset("utf-8"), errors="ignore")
    return payload

"""Expose the public utility surface for imapquery.

What:
  Re-export the structured logger and the MIME helpers used by the message
  projection.

Why:
  Downstream code can perform ``from imapquery import utils`` imports without
  depending on internal filenames.

Interfaces:
  ``JsonLogger``, ``get_logger``, ``parse_message``, ``parse_headers``,
  ``extract_body_text``.
"""

from .logging import JsonLogger, get_logger
from .mime import extract_body_text, parse_headers, parse_message

__all__ = [
    "JsonLogger",
    "get_logger",
    "extract_body_text",
    "parse_headers",
    "parse_message",
]

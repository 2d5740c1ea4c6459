"""Structured JSON logging with redaction of message content.

What:
  Offer a tiny facade over Python streams so every imapquery component emits
  single-line JSON log records with a consistent schema, and automatically
  masks search patterns and other message content.

Why:
  Query logs are useful for auditing which folders were searched and how many
  messages were touched, but search patterns and subjects are user content.
  Redaction at the logging layer means call sites can pass context freely.

How:
  :class:`JsonLogger` builds a payload with ``ts``, ``lvl``, ``msg`` and
  ``component``, merges a recursively redacted copy of the keyword fields, and
  writes it with :func:`json.dump` followed by a flush.

Interfaces:
  :class:`JsonLogger`, :func:`get_logger`.

Invariants & Safety:
  - Keys listed in ``redact`` are replaced with ``[redacted]`` at any depth.
  - Records go to ``stderr`` by default, resolved at write time, so command
    output on ``stdout`` stays machine readable.
"""
from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, FrozenSet, Iterable, Optional


REDACTED = "[redacted]"
DEFAULT_REDACT_KEYS: FrozenSet[str] = frozenset({"subject", "body", "pattern", "password"})


@dataclass
class JsonLogger:
    """Structured JSON logger with automatic redaction."""

    stream: Any = None
    component: str = "imapquery"
    redact: FrozenSet[str] = DEFAULT_REDACT_KEYS

    def log(self, level: str, message: str, *, extra: Optional[Dict[str, Any]] = None) -> None:
        """Emit one JSON record.

        Args:
          level: Severity such as ``"info"``; stored upper-cased.
          message: Event name, e.g. ``query_completed``.
          extra: Context fields, redacted before serialisation.
        """

        payload = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "lvl": level.upper(),
            "msg": message,
            "component": self.component,
        }
        if extra:
            payload.update(self._redact(extra))
        stream = self.stream if self.stream is not None else sys.stderr
        json.dump(payload, stream, separators=(",", ":"), default=str)
        stream.write("\n")
        stream.flush()

    def info(self, message: str, **kwargs: Any) -> None:
        self.log("INFO", message, extra=kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self.log("WARN", message, extra=kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self.log("ERROR", message, extra=kwargs)

    def _redact(self, data: Dict[str, Any]) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        for key, value in data.items():
            if key in self.redact:
                result[key] = REDACTED
            elif isinstance(value, dict):
                result[key] = self._redact(value)
            else:
                result[key] = value
        return result


def get_logger(component: str, *, redact: Optional[Iterable[str]] = None) -> JsonLogger:
    """Return a :class:`JsonLogger` bound to ``component``.

    ``redact`` replaces the default set of masked keys when given.
    """

    keys = frozenset(redact) if redact is not None else DEFAULT_REDACT_KEYS
    return JsonLogger(component=component, redact=keys)

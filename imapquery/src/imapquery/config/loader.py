"""Locate, parse and cache the imapquery runtime configuration.

What:
  Resolve ``config.yaml`` from an explicit path or, failing that, the
  ``IMAPQUERY_CONFIG_PATH`` environment variable and well-known defaults,
  parse it with PyYAML and validate it into a
  :class:`~imapquery.config.schema.RuntimeConfig`.

Why:
  Connection settings and query defaults live outside the package and can be
  malformed. Converting every parsing, IO and validation failure into one
  typed exception that names the file keeps the command line and library
  callers from dealing with three unrelated error types.

How:
  An explicit path is loaded directly. Otherwise :func:`_candidate_paths`
  yields deduplicated locations in precedence order and the first existing
  file is used. The file is parsed with :func:`yaml.safe_load`, validated with
  :meth:`RuntimeConfig.model_validate` and cached together with its path
  until :func:`reset_runtime_config` or ``reload=True``.

Interfaces:
  :func:`load_runtime_config`, :func:`get_runtime_config`,
  :func:`reset_runtime_config`, :class:`ConfigLoadError`,
  :class:`RuntimeConfigError`.

Invariants:
  - Payloads are only returned after strict pydantic validation.
  - An explicit path always wins over the cache entry of a different path and
    must exist; discovery only applies when no path is given.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Iterable, Optional, Tuple

import yaml
from pydantic import ValidationError as _PydanticValidationError

from ..errors import ImapQueryError
from .schema import RuntimeConfig


class ConfigLoadError(ImapQueryError):
    """Base error for configuration parsing or validation failures."""


class RuntimeConfigError(ConfigLoadError):
    """Raised when ``config.yaml`` cannot be found, read, parsed or validated."""


_CONFIG_ENV = "IMAPQUERY_CONFIG_PATH"
_DEFAULT_LOCATIONS: Tuple[Path, ...] = (
    Path("config.yaml"),
    Path("~/.config/imapquery/config.yaml"),
    Path("/etc/imapquery/config.yaml"),
)
_RUNTIME_CACHE: Optional[Tuple[Path, RuntimeConfig]] = None


def _candidate_paths() -> Iterable[Path]:
    """Yield discoverable configuration locations from most to least specific."""

    seen: set[Path] = set()
    candidates = []
    env_path = os.environ.get(_CONFIG_ENV)
    if env_path:
        candidates.append(Path(env_path))
    candidates.extend(_DEFAULT_LOCATIONS)
    for candidate in candidates:
        candidate = candidate.expanduser()
        if candidate not in seen:
            seen.add(candidate)
            yield candidate


def _parse_config_payload(text: str, source: Path) -> dict[str, Any]:
    try:
        payload = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise RuntimeConfigError(f"Invalid YAML in {source}: {exc}") from exc
    if not isinstance(payload, dict):
        raise RuntimeConfigError(f"{source} must contain a mapping at the top-level")
    return payload


def _load_runtime_from_path(path: Path) -> RuntimeConfig:
    try:
        text = path.read_text()
    except FileNotFoundError as exc:
        raise RuntimeConfigError(f"Configuration file missing: {path}") from exc
    except OSError as exc:  # pragma: no cover - filesystem surface
        raise RuntimeConfigError(f"Unable to read configuration file {path}: {exc}") from exc
    payload = _parse_config_payload(text, path)
    try:
        return RuntimeConfig.model_validate(payload)
    except _PydanticValidationError as exc:
        raise RuntimeConfigError(f"Invalid configuration in {path}: {exc}") from exc


def load_runtime_config(
    path: Optional[Path | str] = None,
    *,
    reload: bool = False,
) -> RuntimeConfig:
    """Resolve, parse, and cache the runtime configuration.

    Args:
      path: Optional explicit location of ``config.yaml``.
      reload: When ``True`` forces a fresh load bypassing the cache.

    Returns:
      The validated runtime configuration.

    Raises:
      RuntimeConfigError: If the explicit path or, without one, every
        candidate is missing, or the selected file fails to parse or validate.
    """

    global _RUNTIME_CACHE

    requested_path = Path(path).expanduser() if isinstance(path, (str, Path)) else None
    if not reload and _RUNTIME_CACHE is not None:
        cached_path, cached_config = _RUNTIME_CACHE
        if requested_path is None or cached_path == requested_path:
            return cached_config

    if requested_path is not None:
        config = _load_runtime_from_path(requested_path)
        _RUNTIME_CACHE = (requested_path, config)
        return config

    searched: list[str] = []
    for candidate in _candidate_paths():
        if not candidate.exists():
            searched.append(str(candidate))
            continue
        config = _load_runtime_from_path(candidate)
        _RUNTIME_CACHE = (candidate, config)
        return config

    raise RuntimeConfigError(
        f"Unable to locate config.yaml (searched: {', '.join(searched) or '<none>'})"
    )


def get_runtime_config() -> RuntimeConfig:
    """Return the cached runtime configuration, loading it on demand."""

    return load_runtime_config()


def reset_runtime_config() -> None:
    """Forget the cached configuration so the next access reloads it."""

    global _RUNTIME_CACHE
    _RUNTIME_CACHE = None

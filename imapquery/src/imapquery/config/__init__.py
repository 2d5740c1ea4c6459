"""Runtime configuration loading and schema.

What:
  Expose the loader helpers and pydantic models that describe ``config.yaml``.

Why:
  Callers should only reach configuration through validated models; keeping
  ``__all__`` explicit documents that surface.

Interfaces:
  - get_runtime_config / load_runtime_config / reset_runtime_config
  - ConfigLoadError / RuntimeConfigError
  - RuntimeConfig / ImapSettings / QuerySettings / LoggingSettings
"""

from .loader import (
    ConfigLoadError,
    RuntimeConfigError,
    get_runtime_config,
    load_runtime_config,
    reset_runtime_config,
)
from .schema import ImapSettings, LoggingSettings, QuerySettings, RuntimeConfig

__all__ = [
    "ConfigLoadError",
    "RuntimeConfigError",
    "get_runtime_config",
    "load_runtime_config",
    "reset_runtime_config",
    "ImapSettings",
    "LoggingSettings",
    "QuerySettings",
    "RuntimeConfig",
]

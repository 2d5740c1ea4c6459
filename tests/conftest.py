"""Pytest configuration shared by every suite.

What:
  Establish project import paths and define a fixture that applies a canned
  runtime configuration to every test.

Why:
  Tests must import the in-repo ``imapquery`` package rather than an installed
  wheel, and the runtime configuration is cached globally, so each test needs
  a deterministic starting point.

How:
  Prepend ``imapquery/src`` to ``sys.path`` at import time and point
  ``IMAPQUERY_CONFIG_PATH`` at ``tests/data/config.yaml`` while resetting the
  configuration cache around every test.

Interfaces:
  :func:`runtime_config` (pytest fixture).
"""

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "imapquery" / "src"
if SRC_DIR.exists():
    sys.path.insert(0, str(SRC_DIR))

import pytest

from imapquery.config.loader import reset_runtime_config

CONFIG_PATH = Path(__file__).resolve().parent / "data" / "config.yaml"


@pytest.fixture(autouse=True)
def runtime_config(monkeypatch: pytest.MonkeyPatch):
    """Apply the canned configuration file for every test."""

    monkeypatch.setenv("IMAPQUERY_CONFIG_PATH", str(CONFIG_PATH))
    monkeypatch.delenv("IMAPQUERY_PASSWORD", raising=False)
    reset_runtime_config()
    try:
        yield
    finally:
        reset_runtime_config()

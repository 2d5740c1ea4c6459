"""
Module: tests/unit/test_config_loader.py

What:
    Validate the runtime configuration loader: discovery through the
    environment override, caching, explicit paths, strict validation and error
    signalling.

Why:
    A half-parsed configuration would connect to the wrong server or pre-fetch
    the wrong attributes. Every failure mode must surface as
    :class:`RuntimeConfigError` naming the offending file.

How:
    Write YAML payloads to temporary files, point the loader at them and
    assert on the resulting models and raised exceptions.

Invariants & Safety Rules:
    - The autouse fixture in ``tests/conftest.py`` resets the cache around
      every test.
"""

import pytest

from imapquery.config import loader
from imapquery.config.loader import (
    ConfigLoadError,
    RuntimeConfigError,
    get_runtime_config,
    load_runtime_config,
    reset_runtime_config,
)
from imapquery.errors import ImapQueryError

MINIMAL = """
imap:
  host: mail.example.org
  username: someone
"""


def test_canned_configuration_is_loaded_from_environment():
    config = get_runtime_config()
    assert config.imap.host == "imap.example.test"
    assert config.query.prefetch == ["envelope", "flags"]
    assert config.logging.component == "imapquery-tests"


def test_defaults_fill_optional_sections(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(MINIMAL)
    config = load_runtime_config(path)
    assert config.imap.port == 993
    assert config.imap.ssl is True
    assert config.imap.default_mailbox == "INBOX"
    assert config.query.rate_limit_per_minute == 500
    assert "password" in config.logging.redact


def test_cache_until_reset(tmp_path, monkeypatch):
    """
    What:
        The loaded configuration is cached until explicitly reset or reloaded.

    Why:
        Connection defaults are read on every :class:`ImapConfig` construction;
        re-reading the file each time would be wasteful and racy.

    How:
        Load once, rewrite the file, and compare cached, reloaded and reset
        results.
    """
    path = tmp_path / "config.yaml"
    path.write_text(MINIMAL)
    monkeypatch.setenv("IMAPQUERY_CONFIG_PATH", str(path))
    reset_runtime_config()
    first = get_runtime_config()

    path.write_text(MINIMAL.replace("mail.example.org", "other.example.org"))
    assert get_runtime_config() is first
    assert load_runtime_config(reload=True).imap.host == "other.example.org"
    reset_runtime_config()
    assert get_runtime_config().imap.host == "other.example.org"


def test_prefetch_names_are_normalised(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(MINIMAL + "query:\n  prefetch: [ENVELOPE, Body]\n")
    assert load_runtime_config(path).query.prefetch == ["envelope", "body"]


@pytest.mark.parametrize(
    "payload",
    [
        MINIMAL + "unexpected: true\n",
        MINIMAL + "query:\n  prefetch: [thumbnail]\n",
        "imap:\n  host: only-a-host\n",
        "- just\n- a list\n",
        "imap: [unclosed\n",
    ],
)
def test_invalid_payloads_raise(tmp_path, payload):
    path = tmp_path / "config.yaml"
    path.write_text(payload)
    with pytest.raises(RuntimeConfigError) as excinfo:
        load_runtime_config(path)
    assert str(path) in str(excinfo.value)


def test_missing_config_raises(tmp_path, monkeypatch):
    monkeypatch.setenv("IMAPQUERY_CONFIG_PATH", str(tmp_path / "absent.yaml"))
    monkeypatch.setattr(loader, "_DEFAULT_LOCATIONS", ())
    reset_runtime_config()
    with pytest.raises(ConfigLoadError, match="absent.yaml"):
        get_runtime_config()


def test_config_errors_share_the_package_base():
    assert issubclass(RuntimeConfigError, ConfigLoadError)
    assert issubclass(ConfigLoadError, ImapQueryError)

from __future__ import annotations

import logging

import pytest

from chatwarden.config import ConfigurationError, configure_logging, resolve_log_level


def test_resolve_log_level_defaults_to_info(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CHATWARDEN_LOG_LEVEL", raising=False)

    assert resolve_log_level() == logging.INFO


def test_resolve_log_level_reads_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CHATWARDEN_LOG_LEVEL", "debug")

    assert resolve_log_level() == logging.DEBUG


def test_resolve_log_level_rejects_unknown_names() -> None:
    with pytest.raises(ConfigurationError):
        resolve_log_level("chatty")


def test_configure_logging_force_sets_root_level() -> None:
    root = logging.getLogger()
    previous_level = root.level
    previous_handlers = list(root.handlers)
    try:
        configure_logging(level=logging.WARNING, force=True)
        assert root.level == logging.WARNING
    finally:
        for handler in root.handlers:
            root.removeHandler(handler)
        for handler in previous_handlers:
            root.addHandler(handler)
        root.setLevel(previous_level)

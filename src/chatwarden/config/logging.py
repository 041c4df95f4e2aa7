"""Shared logging helpers for chatwarden."""

from __future__ import annotations

import logging
import os

from .errors import ConfigurationError

LOG_LEVEL_ENV_VAR = "CHATWARDEN_LOG_LEVEL"


def resolve_log_level(value: str | None = None) -> int:
    """Translate a level name (``"debug"``, ``"INFO"``...) into a logging constant.

    Falls back to ``CHATWARDEN_LOG_LEVEL`` and then INFO when no value is given.
    """

    raw = value if value is not None else os.getenv(LOG_LEVEL_ENV_VAR)
    if raw is None or not raw.strip():
        return logging.INFO
    level = logging.getLevelNamesMapping().get(raw.strip().upper())
    if level is None:
        raise ConfigurationError(f"Unknown log level: {raw}")
    return level


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Initialise the root logger once with sensible defaults.

    Parameters mirror ``logging.basicConfig`` with a simplified contract: the level
    defaults to ``CHATWARDEN_LOG_LEVEL`` (or INFO) and the format is terse enough for
    CLI output. Pass ``force=True`` to reconfigure during tests or specialised entry
    points.
    """

    logging.basicConfig(
        level=level if level is not None else resolve_log_level(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )

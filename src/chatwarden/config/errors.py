"""Errors raised while reading chatwarden settings."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when a setting from the environment cannot be used."""

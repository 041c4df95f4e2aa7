"""Pydantic-backed validation adapter."""

from __future__ import annotations

from .schema import (
    SCHEMA_BY_KIND,
    ChatSchema,
    PermissionSchema,
    SponsorSchema,
    SponsorshipHistorySchema,
    TermSchema,
)
from .validator import PydanticValidator

__all__ = [
    "SCHEMA_BY_KIND",
    "ChatSchema",
    "PermissionSchema",
    "PydanticValidator",
    "SponsorSchema",
    "SponsorshipHistorySchema",
    "TermSchema",
]

"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityKind(StrEnum):
    """Discriminator used by validation and persistence dispatch."""

    TERM = "term"
    CHAT = "chat"
    PERMISSION = "permission"
    SPONSOR = "sponsor"
    SPONSORSHIP_HISTORY = "sponsorship_history"


class ChatType(StrEnum):
    PRIVATE = "private"
    GROUP = "group"
    SUPERGROUP = "supergroup"
    CHANNEL = "channel"

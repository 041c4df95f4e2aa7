"""Chat-side instances: the terms of service and chats."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from chatwarden.domain.model.entity import Entity
from chatwarden.domain.model.enums import ChatType, EntityKind

TERM_ID = 1


@dataclass(eq=False, kw_only=True)
class Term(Entity):
    """Singleton terms-of-service record (always stored under ``TERM_ID``)."""

    ENTITY_KIND: ClassVar[EntityKind] = EntityKind.TERM

    id: int | None = TERM_ID
    content: str | None = None


@dataclass(eq=False, kw_only=True)
class Chat(Entity):
    """A chat mirrored from the messaging platform, keyed by the platform's chat id."""

    ENTITY_KIND: ClassVar[EntityKind] = EntityKind.CHAT

    id: int
    type: ChatType
    title: str | None = None
    small_photo_id: str | None = None
    big_photo_id: str | None = None
    username: str | None = None
    description: str | None = None
    invite_link: str | None = None
    is_take_over: bool = False
    left: bool | None = None

"""Public domain model surface."""

from __future__ import annotations

from chatwarden.domain.model.entity import Entity, new_token
from chatwarden.domain.model.enums import ChatType, EntityKind
from chatwarden.domain.model.instances import TERM_ID, Chat, Term
from chatwarden.domain.model.permission import Permission
from chatwarden.domain.model.sponsorship import Sponsor, SponsorshipHistory

ENTITY_CLASS_BY_KIND: dict[EntityKind, type[Entity]] = {
    EntityKind.TERM: Term,
    EntityKind.CHAT: Chat,
    EntityKind.PERMISSION: Permission,
    EntityKind.SPONSOR: Sponsor,
    EntityKind.SPONSORSHIP_HISTORY: SponsorshipHistory,
}

__all__ = [  # noqa: RUF022
    # base
    "Entity",
    "new_token",
    "ENTITY_CLASS_BY_KIND",
    # enums
    "ChatType",
    "EntityKind",
    # instances
    "TERM_ID",
    "Chat",
    "Term",
    "Permission",
    "Sponsor",
    "SponsorshipHistory",
]

"""Per-user permission records owned by a chat."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from chatwarden.domain.model.entity import Entity
from chatwarden.domain.model.enums import EntityKind


@dataclass(eq=False, kw_only=True)
class Permission(Entity):
    """Permission flags of one user inside one chat.

    ``(chat_id, user_id)`` is the natural key; ``id`` is storage-generated.
    """

    ENTITY_KIND: ClassVar[EntityKind] = EntityKind.PERMISSION

    chat_id: int
    user_id: int
    tg_is_owner: bool = False
    tg_can_promote_members: bool = False
    tg_can_restrict_members: bool = False
    readable: bool = True
    writable: bool = False
    customized: bool = False

    @property
    def natural_key(self) -> tuple[int, int]:
        return (self.chat_id, self.user_id)

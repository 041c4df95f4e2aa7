"""Sponsors and the sponsorship records that reference them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

from chatwarden.domain.model.entity import Entity, new_token
from chatwarden.domain.model.enums import EntityKind

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID


@dataclass(eq=False, kw_only=True)
class Sponsor(Entity):
    ENTITY_KIND: ClassVar[EntityKind] = EntityKind.SPONSOR
    IMMUTABLE_FIELDS: ClassVar[frozenset[str]] = frozenset({"id", "uuid"})

    uuid: UUID = field(default_factory=new_token)
    title: str
    avatar: str | None = None
    homepage: str | None = None
    introduction: str | None = None
    contact: str | None = None


@dataclass(eq=False, kw_only=True)
class SponsorshipHistory(Entity):
    """A (promised or reached) sponsorship, optionally attached to a sponsor.

    The ``sponsor`` relationship is added by the persistence mapping and is only
    populated when explicitly loaded or attached by a compound write.
    """

    ENTITY_KIND: ClassVar[EntityKind] = EntityKind.SPONSORSHIP_HISTORY

    sponsor_id: int | None = None
    expected_to: str | None = None
    amount: int
    has_reached: bool = False
    reached_at: datetime | None = None
    hidden: bool | None = None

    if TYPE_CHECKING:
        sponsor: Sponsor | None

"""
Base building blocks:
identity and storage-managed timestamps.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, ClassVar
from uuid import UUID, uuid4

if TYPE_CHECKING:
    from datetime import datetime

    from chatwarden.domain.model.enums import EntityKind


def new_token() -> UUID:
    """Globally unique opaque token; no uniqueness re-check is performed."""
    return uuid4()


@dataclass(eq=False, kw_only=True)
class Entity:
    """Persisted record with an identifier and storage-managed timestamps.

    ``id`` is ``None`` until the storage layer assigns one, unless the subclass
    requires a caller-supplied identifier.
    """

    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    # class-level discriminator; subclasses must override
    ENTITY_KIND: ClassVar[EntityKind]

    # never touched by the update path once assigned
    IMMUTABLE_FIELDS: ClassVar[frozenset[str]] = frozenset({"id"})
    STORAGE_FIELDS: ClassVar[frozenset[str]] = frozenset({"created_at", "updated_at"})

    @property
    def entity_kind(self) -> EntityKind:
        return self.ENTITY_KIND

    def field_values(self) -> dict[str, object]:
        """Snapshot of the writable fields, excluding identifiers and timestamps."""
        excluded = self.IMMUTABLE_FIELDS | self.STORAGE_FIELDS
        return {
            field.name: getattr(self, field.name)
            for field in fields(self)
            if field.name not in excluded
        }

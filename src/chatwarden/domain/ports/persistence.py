"""Ports for persisting instance entities."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from chatwarden.domain.model import (
    Chat,
    Entity,
    Permission,
    Sponsor,
    SponsorshipHistory,
    Term,
)

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from chatwarden.domain.filters import (
        PermissionFilter,
        SponsorFilter,
        SponsorshipHistoryFilter,
    )


@runtime_checkable
class Repository[TEntity: Entity](Protocol):
    """Minimal repository contract for one entity kind.

    Every write method performs exactly one storage write and raises
    ``StorageError`` (or ``NotFoundError`` for vanished rows) on failure.
    """

    def get(self, identifier: object, *, lock: bool = False) -> TEntity | None: ...

    def add(self, entity: TEntity) -> TEntity: ...

    def update(self, entity: TEntity, changes: Mapping[str, object]) -> TEntity: ...

    def remove(self, entity: TEntity) -> None: ...


@runtime_checkable
class ChildRepository[TEntity: Entity](Repository[TEntity], Protocol):
    """Repository for records owned by a parent entity."""

    def list_for_parent(self, parent_id: object) -> Sequence[TEntity]: ...


@runtime_checkable
class TermRepository(Repository[Term], Protocol):
    """Repository contract for the terms of service."""


@runtime_checkable
class ChatRepository(Repository[Chat], Protocol):
    """Repository contract for chats."""


@runtime_checkable
class PermissionRepository(ChildRepository[Permission], Protocol):
    """Repository contract for chat permissions."""

    def find(self, criteria: PermissionFilter) -> Sequence[Permission]: ...


@runtime_checkable
class SponsorRepository(Repository[Sponsor], Protocol):
    """Repository contract for sponsors."""

    def find(self) -> Sequence[Sponsor]: ...

    def find_one(self, criteria: SponsorFilter) -> Sponsor | None: ...


@runtime_checkable
class SponsorshipHistoryRepository(Repository[SponsorshipHistory], Protocol):
    """Repository contract for sponsorship histories."""

    def find(self, criteria: SponsorshipHistoryFilter) -> Sequence[SponsorshipHistory]: ...

"""Unit-of-work abstractions for coordinating repositories."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, cast, runtime_checkable

from chatwarden.domain.model import EntityKind

if TYPE_CHECKING:
    from types import TracebackType

    from chatwarden.domain.model import Entity
    from chatwarden.domain.ports.persistence import (
        ChatRepository,
        PermissionRepository,
        Repository,
        SponsorRepository,
        SponsorshipHistoryRepository,
        TermRepository,
    )


@runtime_checkable
class RepositoryCollection(Protocol):
    """Marker protocol for groups of repositories managed together."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """Generic unit-of-work boundary around a repository collection.

    Reads within the unit observe its own writes; nothing is visible to other
    units before ``commit``. Leaving the context without committing rolls back.
    """

    @property
    def repositories(self) -> TRepositories: ...  # the repo list itself should be immutable

    def __enter__(self) -> UnitOfWork[TRepositories]: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self, reason: object | None = None) -> None: ...


@dataclass(slots=True)
class InstanceRepositories(RepositoryCollection):
    """Repositories required to reconcile chat instances and sponsorships."""

    terms: TermRepository
    chats: ChatRepository
    permissions: PermissionRepository
    sponsors: SponsorRepository
    sponsorship_histories: SponsorshipHistoryRepository

    def for_kind(self, kind: EntityKind) -> Repository[Entity]:
        by_kind: dict[EntityKind, object] = {
            EntityKind.TERM: self.terms,
            EntityKind.CHAT: self.chats,
            EntityKind.PERMISSION: self.permissions,
            EntityKind.SPONSOR: self.sponsors,
            EntityKind.SPONSORSHIP_HISTORY: self.sponsorship_histories,
        }
        return cast("Repository[Entity]", by_kind[kind])


type InstanceUnitOfWork = UnitOfWork[InstanceRepositories]
type InstanceUnitOfWorkFactory = Callable[[], InstanceUnitOfWork]

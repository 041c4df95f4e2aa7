"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, cast

from sqlalchemy import ColumnElement, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from chatwarden.adapters.sqlalchemy.mappings import (
    permission_table,
    sponsor_table,
    sponsorship_history_table,
)
from chatwarden.domain.errors import NotFoundError, StorageError
from chatwarden.domain.filters import Display, SortDirection
from chatwarden.domain.model import (
    ENTITY_CLASS_BY_KIND,
    Chat,
    Entity,
    EntityKind,
    Permission,
    Sponsor,
    SponsorshipHistory,
    Term,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sqlalchemy import Select, UnaryExpression
    from sqlalchemy.orm import QueryableAttribute, Session

    from chatwarden.domain.filters import (
        Ordering,
        PermissionFilter,
        SponsorFilter,
        SponsorshipHistoryFilter,
    )

log = logging.getLogger(__name__)


class SqlAlchemyRepository[TEntity: Entity]:
    """Shared single-entity reads and flushed writes for one entity kind."""

    def __init__(self, session: Session, kind: EntityKind) -> None:
        self.session = session
        self._kind = kind
        self._entity_cls = cast("type[TEntity]", ENTITY_CLASS_BY_KIND[kind])

    def get(self, identifier: object, *, lock: bool = False) -> TEntity | None:
        # FOR UPDATE is dropped silently by dialects without row locks (SQLite)
        try:
            return self.session.get(self._entity_cls, identifier, with_for_update=lock or None)
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not load {self._kind} {identifier!r}: {exc}") from exc

    def add(self, entity: TEntity) -> TEntity:
        self.session.add(entity)
        self._flush(f"insert {self._kind}")
        return entity

    def update(self, entity: TEntity, changes: Mapping[str, object]) -> TEntity:
        current = self._current(entity)
        for name, value in changes.items():
            setattr(current, name, value)
        self._flush(f"update {self._kind} {current.id}")
        return current

    def remove(self, entity: TEntity) -> None:
        current = self._current(entity)
        self.session.delete(current)
        self._flush(f"delete {self._kind} {current.id}")

    def _current(self, entity: TEntity) -> TEntity:
        """Return the row for ``entity`` as known to this session."""

        if entity.id is None:
            raise NotFoundError(self._kind, None)
        current = self.get(entity.id)
        if current is None:
            raise NotFoundError(self._kind, entity.id)
        return current

    def _flush(self, action: str) -> None:
        try:
            self.session.flush()
        except SQLAlchemyError as exc:
            log.warning("Failed to %s: %s", action, exc)
            raise StorageError(f"Failed to {action}: {exc}") from exc

    def _all(self, stmt: Select[tuple[TEntity]]) -> list[TEntity]:
        try:
            return list(self.session.scalars(stmt))
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not query {self._kind}: {exc}") from exc


class SqlAlchemyTermRepository(SqlAlchemyRepository[Term]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, EntityKind.TERM)


class SqlAlchemyChatRepository(SqlAlchemyRepository[Chat]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, EntityKind.CHAT)


class SqlAlchemyPermissionRepository(SqlAlchemyRepository[Permission]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, EntityKind.PERMISSION)

    def find(self, criteria: PermissionFilter) -> list[Permission]:
        stmt = select(Permission)
        if criteria.chat_id is not None:
            stmt = stmt.where(permission_table.c.chat_id == criteria.chat_id)
        if criteria.user_id is not None:
            stmt = stmt.where(permission_table.c.user_id == criteria.user_id)
        return self._all(stmt.order_by(permission_table.c.id))

    def list_for_parent(self, parent_id: object) -> list[Permission]:
        stmt = select(Permission).where(permission_table.c.chat_id == parent_id)
        return self._all(stmt.order_by(permission_table.c.id))


class SqlAlchemySponsorRepository(SqlAlchemyRepository[Sponsor]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, EntityKind.SPONSOR)

    def find(self) -> list[Sponsor]:
        stmt = select(Sponsor).order_by(
            sponsor_table.c.updated_at.desc(), sponsor_table.c.id.desc()
        )
        return self._all(stmt)

    def find_one(self, criteria: SponsorFilter) -> Sponsor | None:
        stmt = select(Sponsor)
        if criteria.uuid is not None:
            stmt = stmt.where(sponsor_table.c.uuid == criteria.uuid)
        try:
            return self.session.scalars(stmt).one_or_none()
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not query {self._kind}: {exc}") from exc


class SqlAlchemySponsorshipHistoryRepository(SqlAlchemyRepository[SponsorshipHistory]):
    def __init__(self, session: Session) -> None:
        super().__init__(session, EntityKind.SPONSORSHIP_HISTORY)

    def find(self, criteria: SponsorshipHistoryFilter) -> list[SponsorshipHistory]:
        hidden = sponsorship_history_table.c.hidden
        stmt = select(SponsorshipHistory)
        if criteria.has_reached is not None:
            stmt = stmt.where(sponsorship_history_table.c.has_reached == criteria.has_reached)
        if criteria.display is Display.NOT_HIDDEN:
            stmt = stmt.where(or_(hidden.is_(None), hidden.is_(False)))
        elif criteria.display is Display.HIDDEN:
            stmt = stmt.where(hidden.is_(True))
        stmt = stmt.order_by(*(_order_clause(ordering) for ordering in criteria.order_by))
        if criteria.preload_sponsor:
            sponsor_attr = cast(
                "QueryableAttribute[Sponsor]",
                SponsorshipHistory.sponsor,  # pyright: ignore[reportAttributeAccessIssue]
            )
            stmt = stmt.options(selectinload(sponsor_attr))
        return self._all(stmt)


def _order_clause(ordering: Ordering) -> UnaryExpression[object] | ColumnElement[object]:
    try:
        column = sponsorship_history_table.c[ordering.field]
    except KeyError as exc:
        raise StorageError(f"Cannot order sponsorship histories by {ordering.field!r}") from exc
    match ordering.direction:
        case SortDirection.ASC:
            return column.asc()
        case SortDirection.DESC:
            return column.desc()
        case SortDirection.DESC_NULLS_FIRST:
            return column.desc().nulls_first()


if TYPE_CHECKING:
    from chatwarden.domain.ports.persistence import (
        ChatRepository,
        PermissionRepository,
        SponsorRepository,
        SponsorshipHistoryRepository,
        TermRepository,
    )

    _session_stub = cast("Session", object())
    _term_repo: TermRepository = SqlAlchemyTermRepository(_session_stub)
    _chat_repo: ChatRepository = SqlAlchemyChatRepository(_session_stub)
    _permission_repo: PermissionRepository = SqlAlchemyPermissionRepository(_session_stub)
    _sponsor_repo: SponsorRepository = SqlAlchemySponsorRepository(_session_stub)
    _history_repo: SponsorshipHistoryRepository = SqlAlchemySponsorshipHistoryRepository(
        _session_stub
    )

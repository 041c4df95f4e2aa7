"""SQLAlchemy mapping metadata for the chatwarden domain model."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import Final

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers, relationship

from chatwarden.domain.model import (
    Chat,
    ChatType,
    EntityKind,
    Permission,
    Sponsor,
    SponsorshipHistory,
    Term,
)

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _enum_values(enum_cls: type[ChatType]) -> list[str]:
    return [member.value for member in enum_cls]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


def _timestamp_columns() -> tuple[Column[datetime], Column[datetime]]:
    """Storage-managed ``created_at``/``updated_at`` pair for one table."""

    return (
        Column("created_at", UTCDateTime(), nullable=False, default=_utcnow),
        Column("updated_at", UTCDateTime(), nullable=False, default=_utcnow, onupdate=_utcnow),
    )


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Instance tables ---------------------------------------------------------------

term_table = Table(
    "term",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=False),
    Column("content", Text, nullable=True),
    *_timestamp_columns(),
)

chat_table = Table(
    "chat",
    mapper_registry.metadata,
    Column("id", BigInteger, primary_key=True, autoincrement=False),
    Column(
        "type",
        Enum(ChatType, native_enum=False, length=10, values_callable=_enum_values),
        nullable=False,
    ),
    Column("title", String, nullable=True),
    Column("small_photo_id", String, nullable=True),
    Column("big_photo_id", String, nullable=True),
    Column("username", String, nullable=True),
    Column("description", Text, nullable=True),
    Column("invite_link", String, nullable=True),
    Column("is_take_over", Boolean, nullable=False, default=False),
    Column("left", Boolean, nullable=True),
    *_timestamp_columns(),
)

permission_table = Table(
    "permission",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("chat_id", BigInteger, ForeignKey("chat.id", ondelete="CASCADE"), nullable=False),
    Column("user_id", BigInteger, nullable=False),
    Column("tg_is_owner", Boolean, nullable=False, default=False),
    Column("tg_can_promote_members", Boolean, nullable=False, default=False),
    Column("tg_can_restrict_members", Boolean, nullable=False, default=False),
    Column("readable", Boolean, nullable=False, default=True),
    Column("writable", Boolean, nullable=False, default=False),
    Column("customized", Boolean, nullable=False, default=False),
    *_timestamp_columns(),
    UniqueConstraint("chat_id", "user_id", name="uq_permission_chat_user"),
    Index("ix_permission_chat_id", "chat_id"),
)

# Sponsorship tables ------------------------------------------------------------

sponsor_table = Table(
    "sponsor",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("uuid", UUIDColumnType, nullable=False, unique=True),
    Column("title", String, nullable=False),
    Column("avatar", String, nullable=True),
    Column("homepage", String, nullable=True),
    Column("introduction", Text, nullable=True),
    Column("contact", String, nullable=True),
    *_timestamp_columns(),
)

sponsorship_history_table = Table(
    "sponsorship_history",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "sponsor_id",
        Integer,
        ForeignKey("sponsor.id", ondelete="SET NULL"),
        nullable=True,
    ),
    Column("expected_to", String, nullable=True),
    Column("amount", Integer, nullable=False),
    Column("has_reached", Boolean, nullable=False, default=False),
    Column("reached_at", UTCDateTime(), nullable=True),
    Column("hidden", Boolean, nullable=True),
    *_timestamp_columns(),
    Index("ix_sponsorship_history_sponsor_id", "sponsor_id"),
)

TABLE_BY_KIND: Final[dict[EntityKind, Table]] = {
    EntityKind.TERM: term_table,
    EntityKind.CHAT: chat_table,
    EntityKind.PERMISSION: permission_table,
    EntityKind.SPONSOR: sponsor_table,
    EntityKind.SPONSORSHIP_HISTORY: sponsorship_history_table,
}


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(Term, term_table)
    mapper_registry.map_imperatively(Chat, chat_table)
    mapper_registry.map_imperatively(Permission, permission_table)
    mapper_registry.map_imperatively(Sponsor, sponsor_table)
    mapper_registry.map_imperatively(
        SponsorshipHistory,
        sponsorship_history_table,
        properties={
            "sponsor": relationship(Sponsor),
        },
    )

    configure_mappers()
    return mapper_registry

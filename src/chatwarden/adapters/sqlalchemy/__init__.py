"""SQLAlchemy adapter package for chatwarden."""

from __future__ import annotations

from .mappings import (
    TABLE_BY_KIND,
    mapper_registry,
    start_mappers,
)
from .repositories import (
    SqlAlchemyChatRepository,
    SqlAlchemyPermissionRepository,
    SqlAlchemyRepository,
    SqlAlchemySponsorRepository,
    SqlAlchemySponsorshipHistoryRepository,
    SqlAlchemyTermRepository,
)
from .unit_of_work import (
    SqlAlchemyInstanceUnitOfWork,
    StartupError,
    configured_engine,
    create_engine_for,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "TABLE_BY_KIND",
    "SqlAlchemyChatRepository",
    "SqlAlchemyInstanceUnitOfWork",
    "SqlAlchemyPermissionRepository",
    "SqlAlchemyRepository",
    "SqlAlchemySponsorRepository",
    "SqlAlchemySponsorshipHistoryRepository",
    "SqlAlchemyTermRepository",
    "StartupError",
    "configured_engine",
    "create_engine_for",
    "is_started",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]

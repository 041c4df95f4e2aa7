"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import (
    ChatRepository,
    ChildRepository,
    PermissionRepository,
    Repository,
    SponsorRepository,
    SponsorshipHistoryRepository,
    TermRepository,
)
from .unit_of_work import (
    InstanceRepositories,
    InstanceUnitOfWork,
    InstanceUnitOfWorkFactory,
    RepositoryCollection,
    UnitOfWork,
)
from .validation import ValidatedFields, Validator

__all__ = [
    "ChatRepository",
    "ChildRepository",
    "InstanceRepositories",
    "InstanceUnitOfWork",
    "InstanceUnitOfWorkFactory",
    "PermissionRepository",
    "Repository",
    "RepositoryCollection",
    "SponsorRepository",
    "SponsorshipHistoryRepository",
    "TermRepository",
    "UnitOfWork",
    "ValidatedFields",
    "Validator",
]

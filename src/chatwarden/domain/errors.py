"""Error taxonomy shared by the reconciliation components.

Errors are carried inside :class:`~chatwarden.domain.result.Err` values between
components and only raised when a caller unwraps a result.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chatwarden.domain.model import EntityKind


class InstanceError(Exception):
    """Base class for errors surfaced by chatwarden operations."""


@dataclass(frozen=True, slots=True)
class FieldError:
    field: str
    reason: str

    def __str__(self) -> str:
        return f"{self.field}: {self.reason}"


class ValidationError(InstanceError):
    """Caller-correctable, field-level rejection of a payload. Never retried."""

    def __init__(self, kind: EntityKind, errors: tuple[FieldError, ...]) -> None:
        self.kind = kind
        self.errors = errors
        details = "; ".join(str(error) for error in errors) or "invalid payload"
        super().__init__(f"Invalid {kind} fields: {details}")

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(error.field for error in self.errors)


class StorageError(InstanceError):
    """Engine-level failure (constraint violation, lost connection...)."""


class NotFoundError(InstanceError):
    """An entity that must already exist is missing from storage."""

    def __init__(self, kind: EntityKind, identifier: object) -> None:
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} {identifier!r} not found")

"""Explicit query filters.

Every field is optional; adapters translate a field into a predicate only when it
is set, so an empty filter matches everything.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uuid import UUID


class SortDirection(StrEnum):
    ASC = "asc"
    DESC = "desc"
    DESC_NULLS_FIRST = "desc_nulls_first"


class Display(StrEnum):
    NOT_HIDDEN = "not_hidden"
    HIDDEN = "hidden"


@dataclass(frozen=True, slots=True)
class Ordering:
    field: str
    direction: SortDirection = SortDirection.ASC


@dataclass(frozen=True, slots=True)
class PermissionFilter:
    chat_id: int | None = None
    user_id: int | None = None


@dataclass(frozen=True, slots=True)
class SponsorFilter:
    uuid: UUID | None = None


@dataclass(frozen=True, slots=True)
class SponsorshipHistoryFilter:
    has_reached: bool | None = None
    display: Display | None = None
    order_by: tuple[Ordering, ...] = (Ordering("reached_at", SortDirection.DESC),)
    preload_sponsor: bool = False

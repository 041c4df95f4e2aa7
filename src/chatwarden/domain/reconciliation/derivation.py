"""Derived field rules applied to raw payloads before validation."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Final

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

# same coercion the schemas apply to boolean fields
_BOOL: Final[TypeAdapter[bool]] = TypeAdapter(bool)


def utcnow() -> datetime:
    return datetime.now(UTC)


def _is_set(value: object) -> bool:
    try:
        return _BOOL.validate_python(value)
    except PydanticValidationError:
        return False


def fill_reached_at(
    fields: Mapping[str, object],
    *,
    now: Callable[[], datetime] = utcnow,
) -> dict[str, object]:
    """Stamp ``reached_at`` with the current time for reached sponsorships.

    Only applies when ``has_reached`` coerces to true and ``reached_at`` is missing,
    ``None`` or blank; an explicit timestamp is preserved as given. Values the
    schema would reject are left for validation to report.
    """

    derived = dict(fields)
    if not _is_set(derived.get("has_reached")):
        return derived
    reached_at = derived.get("reached_at")
    if reached_at is None or (isinstance(reached_at, str) and not reached_at.strip()):
        derived["reached_at"] = now()
    return derived

"""Port for the validation collaborator."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

    from chatwarden.domain.errors import ValidationError
    from chatwarden.domain.model import EntityKind
    from chatwarden.domain.result import Result


type ValidatedFields = dict[str, object]


@runtime_checkable
class Validator(Protocol):
    """Turn raw caller fields into storable values for one entity kind.

    Implementations are opaque to the core: the returned mapping is written as is
    and a returned ``ValidationError`` is surfaced to the caller untouched.
    """

    def validate(
        self, kind: EntityKind, raw: Mapping[str, object]
    ) -> Result[ValidatedFields, ValidationError]: ...

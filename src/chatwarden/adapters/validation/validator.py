"""Validation collaborator backed by the pydantic schemas."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pydantic

from chatwarden.adapters.validation.schema import SCHEMA_BY_KIND
from chatwarden.domain.errors import FieldError, ValidationError
from chatwarden.domain.result import Err, Ok

if TYPE_CHECKING:
    from collections.abc import Mapping

    from pydantic_core import ErrorDetails

    from chatwarden.domain.model import EntityKind
    from chatwarden.domain.ports.validation import ValidatedFields
    from chatwarden.domain.result import Result


def _field_error(detail: ErrorDetails) -> FieldError:
    location = ".".join(str(part) for part in detail["loc"])
    return FieldError(field=location or "__root__", reason=detail["msg"])


class PydanticValidator:
    """Validate raw fields against the schema registered for the entity kind."""

    def validate(
        self, kind: EntityKind, raw: Mapping[str, object]
    ) -> Result[ValidatedFields, ValidationError]:
        schema = SCHEMA_BY_KIND[kind]
        try:
            model = schema.model_validate(dict(raw))
        except pydantic.ValidationError as exc:
            errors = tuple(_field_error(detail) for detail in exc.errors())
            return Err(ValidationError(kind, errors))
        return Ok(model.model_dump())


if TYPE_CHECKING:
    from chatwarden.domain.ports.validation import Validator

    _validator_check: Validator = PydanticValidator()

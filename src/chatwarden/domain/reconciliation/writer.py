"""Single-entity writes routed through the validation collaborator."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from chatwarden.domain.errors import NotFoundError, StorageError, ValidationError
from chatwarden.domain.model import ENTITY_CLASS_BY_KIND
from chatwarden.domain.result import Err, Ok

if TYPE_CHECKING:
    from collections.abc import Mapping

    from chatwarden.domain.model import Entity, EntityKind
    from chatwarden.domain.ports.unit_of_work import InstanceRepositories
    from chatwarden.domain.ports.validation import Validator
    from chatwarden.domain.result import Result

log = logging.getLogger(__name__)

_MISSING = object()


@dataclass(slots=True)
class ValidatedEntityWriter:
    """Create, update and delete entities of any kind inside one open unit.

    Each call performs at most one storage write. Validation failures are returned
    exactly as the validator produced them; storage failures are reported, never
    retried.
    """

    repositories: InstanceRepositories
    validator: Validator

    def create(
        self, kind: EntityKind, raw: Mapping[str, object]
    ) -> Result[Entity, ValidationError | StorageError]:
        validated = self.validator.validate(kind, raw)
        if isinstance(validated, Err):
            log.debug("Rejected new %s: %s", kind, validated.error)
            return validated

        entity = ENTITY_CLASS_BY_KIND[kind](**validated.value)
        try:
            stored = self.repositories.for_kind(kind).add(entity)
        except StorageError as exc:
            return Err(exc)
        log.debug("Created %s %s", kind, stored.id)
        return Ok(stored)

    def update(
        self, entity: Entity, raw: Mapping[str, object]
    ) -> Result[Entity, ValidationError | StorageError | NotFoundError]:
        kind = entity.entity_kind
        snapshot = entity.field_values()
        identifiers = {name: getattr(entity, name) for name in entity.IMMUTABLE_FIELDS}
        # absent keys keep their stored value; identifiers cannot be overridden
        validated = self.validator.validate(kind, {**snapshot, **raw, **identifiers})
        if isinstance(validated, Err):
            log.debug("Rejected update of %s %s: %s", kind, entity.id, validated.error)
            return validated

        changes = {
            name: value
            for name, value in validated.value.items()
            if name not in entity.IMMUTABLE_FIELDS and snapshot.get(name, _MISSING) != value
        }
        try:
            stored = self.repositories.for_kind(kind).update(entity, changes)
        except (StorageError, NotFoundError) as exc:
            return Err(exc)
        log.debug("Updated %s %s: %s", kind, stored.id, sorted(changes))
        return Ok(stored)

    def delete(self, entity: Entity) -> Result[None, StorageError | NotFoundError]:
        kind = entity.entity_kind
        try:
            self.repositories.for_kind(kind).remove(entity)
        except (StorageError, NotFoundError) as exc:
            return Err(exc)
        log.debug("Deleted %s %s", kind, entity.id)
        return Ok(None)

"""Fetch an entity by its caller-supplied identifier, creating or updating it."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from chatwarden.domain.locking import KeyedLocks
from chatwarden.domain.reconciliation.atomic import run_atomically
from chatwarden.domain.reconciliation.writer import ValidatedEntityWriter

if TYPE_CHECKING:
    from collections.abc import Mapping

    from chatwarden.domain.errors import InstanceError
    from chatwarden.domain.model import Entity, EntityKind
    from chatwarden.domain.ports.unit_of_work import (
        InstanceUnitOfWork,
        InstanceUnitOfWorkFactory,
    )
    from chatwarden.domain.ports.validation import Validator
    from chatwarden.domain.result import Result

log = logging.getLogger(__name__)


@dataclass(slots=True)
class ReconcileOrCreate:
    """Create-if-absent, else-update, as one atomic step.

    The read and the write share a unit of work and a per-identifier lock, so two
    concurrent calls for the same identifier can never both observe absence.
    """

    unit_of_work_factory: InstanceUnitOfWorkFactory
    validator: Validator
    locks: KeyedLocks = field(default_factory=KeyedLocks)
    identifier_field: str = "id"

    def __call__(
        self,
        kind: EntityKind,
        identifier: object,
        desired: Mapping[str, object],
    ) -> Result[Entity, InstanceError]:
        def work(uow: InstanceUnitOfWork) -> Result[Entity, InstanceError]:
            writer = ValidatedEntityWriter(uow.repositories, self.validator)
            existing = uow.repositories.for_kind(kind).get(identifier, lock=True)
            if existing is None:
                log.info("Creating %s %s", kind, identifier)
                return writer.create(kind, {**desired, self.identifier_field: identifier})
            return writer.update(existing, desired)

        with self.locks.hold((kind, identifier)):
            return run_atomically(
                self.unit_of_work_factory,
                work,
                label=f"reconcile {kind} {identifier}",
            )

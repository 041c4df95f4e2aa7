"""Converge a parent's child collection onto a desired set of records.

The reconciliation runs in one unit of work:

1. snapshot the persisted children of the parent, keyed by natural key
2. delete the children whose key is absent from the desired set
3. upsert every desired record against the snapshot (never a re-query), stamping
   new records with the parent's key

Deletions go first so a key removed and re-added in the same call is unambiguous.
Records whose key survives are updated in place, keeping their row identity.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, cast

from chatwarden.domain.locking import KeyedLocks
from chatwarden.domain.model import EntityKind
from chatwarden.domain.reconciliation.atomic import run_atomically
from chatwarden.domain.reconciliation.writer import ValidatedEntityWriter
from chatwarden.domain.result import Err, Ok

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from chatwarden.domain.errors import InstanceError
    from chatwarden.domain.model import Entity
    from chatwarden.domain.ports.persistence import ChildRepository
    from chatwarden.domain.ports.unit_of_work import (
        InstanceUnitOfWork,
        InstanceUnitOfWorkFactory,
    )
    from chatwarden.domain.ports.validation import Validator
    from chatwarden.domain.result import Result

log = logging.getLogger(__name__)


@dataclass(slots=True)
class SetReconciliationResult:
    """Summary of the writes performed by one reconciliation."""

    created: int = 0
    updated: int = 0
    deleted: int = 0


@dataclass(slots=True)
class SetReconciler:
    """Make the children of one parent match a desired record list, atomically.

    Children are matched on ``natural_key`` and scoped by ``parent_field``. The
    whole call holds the parent's key lock so concurrent reconciles of one parent
    run one after the other.
    """

    unit_of_work_factory: InstanceUnitOfWorkFactory
    validator: Validator
    child_kind: EntityKind = EntityKind.PERMISSION
    parent_field: str = "chat_id"
    natural_key: str = "user_id"
    locks: KeyedLocks = field(default_factory=KeyedLocks)

    def __call__(
        self,
        parent: Entity,
        desired_records: Sequence[Mapping[str, object]],
    ) -> Result[SetReconciliationResult, InstanceError]:
        parent_id = parent.id

        def work(uow: InstanceUnitOfWork) -> Result[SetReconciliationResult, InstanceError]:
            return self._reconcile(uow, parent_id, desired_records)

        with self.locks.hold((self.child_kind, parent_id)):
            return run_atomically(
                self.unit_of_work_factory,
                work,
                label=f"reconcile {self.child_kind} set of {parent.entity_kind} {parent_id}",
            )

    def _reconcile(
        self,
        uow: InstanceUnitOfWork,
        parent_id: object,
        desired_records: Sequence[Mapping[str, object]],
    ) -> Result[SetReconciliationResult, InstanceError]:
        repository = cast("ChildRepository[Entity]", uow.repositories.for_kind(self.child_kind))
        writer = ValidatedEntityWriter(uow.repositories, self.validator)
        summary = SetReconciliationResult()

        # validate up front so keys compare in their stored form and a bad record
        # aborts before anything is written
        desired: list[tuple[object, dict[str, object]]] = []
        for record in desired_records:
            validated = self.validator.validate(
                self.child_kind, {**record, self.parent_field: parent_id}
            )
            if isinstance(validated, Err):
                return validated
            desired.append((validated.value[self.natural_key], validated.value))

        desired_keys = {key for key, _ in desired}
        if len(desired_keys) != len(desired):
            log.warning(
                "Duplicate %s values for %s %s; the last entry wins",
                self.natural_key,
                self.parent_field,
                parent_id,
            )

        current = {
            getattr(record, self.natural_key): record
            for record in repository.list_for_parent(parent_id)
        }

        for key in [key for key in current if key not in desired_keys]:
            deleted = writer.delete(current.pop(key))
            if isinstance(deleted, Err):
                return deleted
            summary.deleted += 1

        for key, fields in desired:
            existing = current.get(key)
            written = (
                writer.create(self.child_kind, fields)
                if existing is None
                else writer.update(existing, fields)
            )
            if isinstance(written, Err):
                return written
            if existing is None:
                summary.created += 1
            else:
                summary.updated += 1
            current[key] = written.value

        log.info(
            "Reconciled %s set of %s: created=%s, updated=%s, deleted=%s",
            self.child_kind,
            parent_id,
            summary.created,
            summary.updated,
            summary.deleted,
        )
        return Ok(summary)

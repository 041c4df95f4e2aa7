"""Atomic writes that create an attachment entity and link a dependent to it."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from chatwarden.domain.model import EntityKind
from chatwarden.domain.reconciliation.atomic import run_atomically
from chatwarden.domain.reconciliation.derivation import fill_reached_at
from chatwarden.domain.reconciliation.writer import ValidatedEntityWriter
from chatwarden.domain.result import Err, Ok

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from chatwarden.domain.errors import InstanceError
    from chatwarden.domain.model import Entity
    from chatwarden.domain.ports.unit_of_work import (
        InstanceUnitOfWork,
        InstanceUnitOfWorkFactory,
    )
    from chatwarden.domain.ports.validation import Validator
    from chatwarden.domain.result import Result

    type DependentWrite = Callable[
        [ValidatedEntityWriter, dict[str, object]], Result[Entity, InstanceError]
    ]

log = logging.getLogger(__name__)


@dataclass(slots=True)
class CompoundWriter:
    """Create the attachment, then write the dependent stamped with its key.

    Both writes share one unit of work: if either fails, neither persists. The
    returned dependent carries the attachment under ``embed_as`` for convenience;
    that link is not a persisted join.
    """

    unit_of_work_factory: InstanceUnitOfWorkFactory
    validator: Validator
    attachment_kind: EntityKind = EntityKind.SPONSOR
    dependent_kind: EntityKind = EntityKind.SPONSORSHIP_HISTORY
    foreign_key: str = "sponsor_id"
    embed_as: str = "sponsor"
    derive: Callable[[Mapping[str, object]], dict[str, object]] = fill_reached_at

    def create_with_dependent(
        self,
        attachment_fields: Mapping[str, object],
        dependent_template: Mapping[str, object],
    ) -> Result[Entity, InstanceError]:
        def create(
            writer: ValidatedEntityWriter, fields: dict[str, object]
        ) -> Result[Entity, InstanceError]:
            return writer.create(self.dependent_kind, fields)

        return self._write(attachment_fields, dependent_template, create, label="create")

    def update_with_dependent(
        self,
        dependent: Entity,
        attachment_fields: Mapping[str, object],
        dependent_fields: Mapping[str, object],
    ) -> Result[Entity, InstanceError]:
        def update(
            writer: ValidatedEntityWriter, fields: dict[str, object]
        ) -> Result[Entity, InstanceError]:
            return writer.update(dependent, fields)

        return self._write(attachment_fields, dependent_fields, update, label="update")

    def _write(
        self,
        attachment_fields: Mapping[str, object],
        dependent_fields: Mapping[str, object],
        write_dependent: DependentWrite,
        *,
        label: str,
    ) -> Result[Entity, InstanceError]:
        def work(uow: InstanceUnitOfWork) -> Result[Entity, InstanceError]:
            writer = ValidatedEntityWriter(uow.repositories, self.validator)
            attached = writer.create(self.attachment_kind, attachment_fields)
            if isinstance(attached, Err):
                return attached
            attachment = attached.value

            fields = self.derive({**dependent_fields, self.foreign_key: attachment.id})
            written = write_dependent(writer, fields)
            if isinstance(written, Err):
                return written

            dependent = written.value
            setattr(dependent, self.embed_as, attachment)
            log.info(
                "Attached %s %s to %s %s",
                self.attachment_kind,
                attachment.id,
                self.dependent_kind,
                dependent.id,
            )
            return Ok(dependent)

        return run_atomically(
            self.unit_of_work_factory,
            work,
            label=f"{label} {self.dependent_kind} with {self.attachment_kind}",
        )

"""Application wiring entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from chatwarden.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyInstanceUnitOfWork,
    is_started,
    startup,
)
from chatwarden.adapters.validation import PydanticValidator
from chatwarden.domain.instances import InstanceService
from chatwarden.domain.locking import KeyedLocks

if TYPE_CHECKING:
    from chatwarden.domain.ports.unit_of_work import InstanceUnitOfWorkFactory
    from chatwarden.domain.ports.validation import Validator

log = getLogger(__name__)


def build_instance_service(
    *,
    unit_of_work_factory: InstanceUnitOfWorkFactory | None = None,
    validator: Validator | None = None,
    locks: KeyedLocks | None = None,
) -> InstanceService:
    """Assemble an ``InstanceService`` on the configured adapters.

    Without an explicit factory the SQLAlchemy adapter is started (once) on the
    configured database and its unit of work is used.
    """

    if unit_of_work_factory is None:
        if not is_started():
            startup()
        unit_of_work_factory = SqlAlchemyInstanceUnitOfWork
    log.debug("Building instance service")
    return InstanceService(
        unit_of_work_factory=unit_of_work_factory,
        validator=validator if validator is not None else PydanticValidator(),
        locks=locks if locks is not None else KeyedLocks(),
    )

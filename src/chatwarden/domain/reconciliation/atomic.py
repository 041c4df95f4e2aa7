"""Run a piece of work inside one unit of work, committing only on success."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from chatwarden.domain.errors import StorageError
from chatwarden.domain.result import Err

if TYPE_CHECKING:
    from collections.abc import Callable

    from chatwarden.domain.ports.unit_of_work import (
        InstanceUnitOfWork,
        InstanceUnitOfWorkFactory,
    )
    from chatwarden.domain.result import Result

log = logging.getLogger(__name__)


def run_atomically[T, E: Exception](
    unit_of_work_factory: InstanceUnitOfWorkFactory,
    work: Callable[[InstanceUnitOfWork], Result[T, E]],
    *,
    label: str,
) -> Result[T, E | StorageError]:
    """Execute ``work`` in a fresh unit; commit on ``Ok``, roll back on ``Err``.

    A ``StorageError`` raised by a repository, or by the commit itself, is turned
    into an ``Err`` after rolling back. Nothing is retried.
    """

    with unit_of_work_factory() as uow:
        try:
            outcome = work(uow)
        except StorageError as exc:
            uow.rollback(exc)
            return Err(exc)

        if isinstance(outcome, Err):
            log.warning("Rolling back %s: %s", label, outcome.error)
            uow.rollback(outcome.error)
            return outcome

        try:
            uow.commit()
        except StorageError as exc:
            uow.rollback(exc)
            return Err(exc)

    log.debug("Committed %s", label)
    return outcome

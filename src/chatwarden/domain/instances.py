"""Application services for chats, the terms of service and sponsorships.

Every operation opens its own unit of work through the injected factory and
returns a ``Result``; nothing reaches for a process-wide connection.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, cast

from chatwarden.domain.errors import FieldError, ValidationError
from chatwarden.domain.filters import PermissionFilter, SponsorFilter, SponsorshipHistoryFilter
from chatwarden.domain.locking import KeyedLocks
from chatwarden.domain.model import (
    TERM_ID,
    Chat,
    Entity,
    EntityKind,
    Permission,
    Sponsor,
    SponsorshipHistory,
    Term,
)
from chatwarden.domain.reconciliation import (
    CompoundWriter,
    ReconcileOrCreate,
    SetReconciler,
    ValidatedEntityWriter,
    fill_reached_at,
    run_atomically,
    utcnow,
)
from chatwarden.domain.result import Err, Ok

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from datetime import datetime

    from chatwarden.domain.errors import InstanceError
    from chatwarden.domain.ports.unit_of_work import (
        InstanceRepositories,
        InstanceUnitOfWork,
        InstanceUnitOfWorkFactory,
    )
    from chatwarden.domain.ports.validation import Validator
    from chatwarden.domain.reconciliation import SetReconciliationResult
    from chatwarden.domain.result import Result

log = logging.getLogger(__name__)

type Params = Mapping[str, object]


@dataclass(slots=True)
class InstanceService:
    unit_of_work_factory: InstanceUnitOfWorkFactory
    validator: Validator
    locks: KeyedLocks = field(default_factory=KeyedLocks)
    clock: Callable[[], datetime] = utcnow

    # Components -----------------------------------------------------------------

    @property
    def reconcile_or_create(self) -> ReconcileOrCreate:
        return ReconcileOrCreate(self.unit_of_work_factory, self.validator, self.locks)

    @property
    def permission_reconciler(self) -> SetReconciler:
        return SetReconciler(
            self.unit_of_work_factory,
            self.validator,
            child_kind=EntityKind.PERMISSION,
            parent_field="chat_id",
            natural_key="user_id",
            locks=self.locks,
        )

    @property
    def sponsorship_writer(self) -> CompoundWriter:
        return CompoundWriter(
            self.unit_of_work_factory,
            self.validator,
            attachment_kind=EntityKind.SPONSOR,
            dependent_kind=EntityKind.SPONSORSHIP_HISTORY,
            foreign_key="sponsor_id",
            embed_as="sponsor",
            derive=self._derive,
        )

    # Terms ----------------------------------------------------------------------

    def fetch_term(self) -> Result[Term, InstanceError]:
        """Return the terms of service, creating the empty record if absent."""
        return _typed(Term, self.reconcile_or_create(EntityKind.TERM, TERM_ID, {}))

    def create_term(self, params: Params) -> Result[Term, InstanceError]:
        return _typed(Term, self._create(EntityKind.TERM, params))

    def update_term(self, term: Term, params: Params) -> Result[Term, InstanceError]:
        return _typed(Term, self._update(term, params))

    def delete_term(self, term: Term) -> Result[None, InstanceError]:
        return self._delete(term)

    # Chats ----------------------------------------------------------------------

    def create_chat(self, params: Params) -> Result[Chat, InstanceError]:
        return _typed(Chat, self._create(EntityKind.CHAT, params))

    def update_chat(self, chat: Chat, params: Params) -> Result[Chat, InstanceError]:
        return _typed(Chat, self._update(chat, params))

    def fetch_and_update_chat(self, chat_id: int, params: Params) -> Result[Chat, InstanceError]:
        """Update the chat with ``params``, creating it under ``chat_id`` if absent."""
        return _typed(Chat, self.reconcile_or_create(EntityKind.CHAT, chat_id, params))

    def cancel_chat_takeover(self, chat: Chat) -> Result[Chat, InstanceError]:
        return self.update_chat(chat, {"is_take_over": False})

    def get_chat(self, chat_id: int) -> Result[Chat | None, InstanceError]:
        return self._read(f"get chat {chat_id}", lambda repos: repos.chats.get(chat_id))

    def delete_chat(self, chat: Chat) -> Result[None, InstanceError]:
        return self._delete(chat)

    # Permissions ----------------------------------------------------------------

    def reset_chat_permissions(
        self,
        chat: Chat,
        permissions: Sequence[Permission | Params],
    ) -> Result[SetReconciliationResult, InstanceError]:
        """Make the chat's permission list exactly ``permissions``.

        Users missing from ``permissions`` lose their record, the others are
        updated in place or created.
        """

        records = [
            permission.field_values() if isinstance(permission, Permission) else permission
            for permission in permissions
        ]
        return self.permission_reconciler(chat, records)

    def find_permissions(
        self, criteria: PermissionFilter | None = None
    ) -> Result[list[Permission], InstanceError]:
        effective = criteria or PermissionFilter()
        return self._read(
            f"find permissions {effective}",
            lambda repos: list(repos.permissions.find(effective)),
        )

    # Sponsors -------------------------------------------------------------------

    def create_sponsor(self, params: Params) -> Result[Sponsor, InstanceError]:
        return _typed(Sponsor, self._create(EntityKind.SPONSOR, params))

    def update_sponsor(self, sponsor: Sponsor, params: Params) -> Result[Sponsor, InstanceError]:
        return _typed(Sponsor, self._update(sponsor, params))

    def delete_sponsor(self, sponsor: Sponsor) -> Result[None, InstanceError]:
        return self._delete(sponsor)

    def find_sponsors(self) -> Result[list[Sponsor], InstanceError]:
        """All sponsors, most recently updated first."""
        return self._read("find sponsors", lambda repos: list(repos.sponsors.find()))

    def find_sponsor(
        self, criteria: SponsorFilter | None = None
    ) -> Result[Sponsor | None, InstanceError]:
        effective = criteria or SponsorFilter()
        return self._read(
            f"find sponsor {effective}",
            lambda repos: repos.sponsors.find_one(effective),
        )

    # Sponsorship histories ------------------------------------------------------

    def create_sponsorship_history(
        self, params: Params
    ) -> Result[SponsorshipHistory, InstanceError]:
        derived = self._derive(params)
        return _typed(SponsorshipHistory, self._create(EntityKind.SPONSORSHIP_HISTORY, derived))

    def create_sponsorship_history_with_sponsor(
        self, params: Params
    ) -> Result[SponsorshipHistory, InstanceError]:
        """Create a sponsor from ``params["sponsor"]`` and a history attached to it."""

        sponsor_params = params.get("sponsor")
        if not isinstance(sponsor_params, Mapping):
            return Err(_missing_sponsor())
        history_params = {key: value for key, value in params.items() if key != "sponsor"}
        return _typed(
            SponsorshipHistory,
            self.sponsorship_writer.create_with_dependent(
                cast("Params", sponsor_params), history_params
            )
        )

    def update_sponsorship_history(
        self, history: SponsorshipHistory, params: Params
    ) -> Result[SponsorshipHistory, InstanceError]:
        return _typed(SponsorshipHistory, self._update(history, self._derive(params)))

    def update_sponsorship_history_with_create_sponsor(
        self, history: SponsorshipHistory, params: Params
    ) -> Result[SponsorshipHistory, InstanceError]:
        """Create a sponsor from ``params["sponsor"]`` and re-point ``history`` at it."""

        sponsor_params = params.get("sponsor")
        if not isinstance(sponsor_params, Mapping):
            return Err(_missing_sponsor())
        history_params = {key: value for key, value in params.items() if key != "sponsor"}
        return _typed(
            SponsorshipHistory,
            self.sponsorship_writer.update_with_dependent(
                history, cast("Params", sponsor_params), history_params
            )
        )

    def delete_sponsorship_history(
        self, history: SponsorshipHistory
    ) -> Result[None, InstanceError]:
        return self._delete(history)

    def reached_sponsorship_history(
        self, history: SponsorshipHistory
    ) -> Result[SponsorshipHistory, InstanceError]:
        return self.update_sponsorship_history(
            history, {"has_reached": True, "reached_at": self.clock()}
        )

    def find_sponsorship_histories(
        self, criteria: SponsorshipHistoryFilter | None = None
    ) -> Result[list[SponsorshipHistory], InstanceError]:
        effective = criteria or SponsorshipHistoryFilter()
        return self._read(
            f"find sponsorship histories {effective}",
            lambda repos: list(repos.sponsorship_histories.find(effective)),
        )

    # Helpers --------------------------------------------------------------------

    def _derive(self, params: Params) -> dict[str, object]:
        return fill_reached_at(params, now=self.clock)

    def _create(self, kind: EntityKind, params: Params) -> Result[Entity, InstanceError]:
        return self._write(f"create {kind}", lambda writer: writer.create(kind, params))

    def _update(self, entity: Entity, params: Params) -> Result[Entity, InstanceError]:
        return self._write(
            f"update {entity.entity_kind} {entity.id}",
            lambda writer: writer.update(entity, params),
        )

    def _delete(self, entity: Entity) -> Result[None, InstanceError]:
        return self._write(
            f"delete {entity.entity_kind} {entity.id}",
            lambda writer: writer.delete(entity),
        )

    def _write[T](
        self,
        label: str,
        action: Callable[[ValidatedEntityWriter], Result[T, InstanceError]],
    ) -> Result[T, InstanceError]:
        def work(uow: InstanceUnitOfWork) -> Result[T, InstanceError]:
            return action(ValidatedEntityWriter(uow.repositories, self.validator))

        return run_atomically(self.unit_of_work_factory, work, label=label)

    def _read[T](
        self,
        label: str,
        query: Callable[[InstanceRepositories], T],
    ) -> Result[T, InstanceError]:
        def work(uow: InstanceUnitOfWork) -> Result[T, InstanceError]:
            return Ok(query(uow.repositories))

        return run_atomically(self.unit_of_work_factory, work, label=label)


def _typed[TEntity: Entity](
    entity_cls: type[TEntity], result: Result[Entity, InstanceError]
) -> Result[TEntity, InstanceError]:
    if isinstance(result, Ok) and not isinstance(result.value, entity_cls):
        raise TypeError(f"Expected {entity_cls.__name__}, got {type(result.value).__name__}")
    return cast("Result[TEntity, InstanceError]", result)


def _missing_sponsor() -> ValidationError:
    return ValidationError(EntityKind.SPONSOR, (FieldError("sponsor", "Field required"),))


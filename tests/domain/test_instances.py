from __future__ import annotations

from datetime import UTC, datetime

import pytest

from chatwarden.domain.errors import NotFoundError, ValidationError
from chatwarden.domain.filters import (
    Display,
    Ordering,
    PermissionFilter,
    SortDirection,
    SponsorFilter,
    SponsorshipHistoryFilter,
)
from chatwarden.domain.instances import InstanceService, _typed
from chatwarden.domain.model import TERM_ID, Chat, ChatType, EntityKind, Permission, Term
from chatwarden.domain.result import Err, Ok
from tests.helpers.instances import (
    FixedClock,
    chat_params,
    err_value,
    history_params,
    ok_value,
    permission_record,
    sponsor_params,
)


def test_fetch_term_creates_singleton_once(instance_service: InstanceService) -> None:
    first = ok_value(instance_service.fetch_term())
    updated = ok_value(instance_service.update_term(first, {"content": "Be nice"}))
    again = ok_value(instance_service.fetch_term())

    assert first.id == TERM_ID
    assert updated.content == "Be nice"
    assert again.id == TERM_ID
    assert again.content == "Be nice"


def test_delete_term_then_fetch_recreates_empty(instance_service: InstanceService) -> None:
    term = ok_value(instance_service.create_term({"content": "Rules"}))
    ok_value(instance_service.delete_term(term))

    recreated = ok_value(instance_service.fetch_term())

    assert recreated.content is None


def test_fetch_and_update_chat_creates_then_updates(instance_service: InstanceService) -> None:
    created = ok_value(instance_service.fetch_and_update_chat(-1001, {"type": "supergroup"}))
    updated = ok_value(
        instance_service.fetch_and_update_chat(-1001, {"title": "Makers", "is_take_over": True})
    )

    assert created.id == updated.id == -1001
    assert updated.type is ChatType.SUPERGROUP
    assert updated.title == "Makers"
    assert updated.is_take_over is True


def test_cancel_chat_takeover(instance_service: InstanceService) -> None:
    chat = ok_value(instance_service.create_chat(chat_params(is_take_over=True)))

    released = ok_value(instance_service.cancel_chat_takeover(chat))

    assert released.is_take_over is False
    stored = ok_value(instance_service.get_chat(chat.id))
    assert stored is not None
    assert stored.is_take_over is False


def test_get_chat_returns_none_when_absent(instance_service: InstanceService) -> None:
    assert ok_value(instance_service.get_chat(123)) is None


def test_delete_chat_cascades_permissions(instance_service: InstanceService) -> None:
    chat = ok_value(instance_service.create_chat(chat_params()))
    ok_value(instance_service.reset_chat_permissions(chat, [permission_record(1)]))

    ok_value(instance_service.delete_chat(chat))

    assert ok_value(instance_service.get_chat(chat.id)) is None
    assert ok_value(instance_service.find_permissions(PermissionFilter(chat_id=chat.id))) == []


def test_update_missing_chat_is_not_found(instance_service: InstanceService) -> None:
    chat = ok_value(instance_service.create_chat(chat_params()))
    ok_value(instance_service.delete_chat(chat))

    error = err_value(instance_service.update_chat(chat, {"title": "Gone"}))

    assert isinstance(error, NotFoundError)


def test_reset_chat_permissions_example(instance_service: InstanceService) -> None:
    chat = ok_value(instance_service.create_chat(chat_params(42)))
    ok_value(
        instance_service.reset_chat_permissions(
            chat, [permission_record(1, ban=True), permission_record(2, ban=False)]
        )
    )

    ok_value(
        instance_service.reset_chat_permissions(
            chat,
            [
                Permission(chat_id=42, user_id=2, tg_can_restrict_members=True),
                permission_record(3, ban=True),
            ],
        )
    )

    permissions = ok_value(instance_service.find_permissions(PermissionFilter(chat_id=42)))
    assert {(p.user_id, p.tg_can_restrict_members) for p in permissions} == {(2, True), (3, True)}


def test_find_permissions_by_user(instance_service: InstanceService) -> None:
    first = ok_value(instance_service.create_chat(chat_params(1)))
    second = ok_value(instance_service.create_chat(chat_params(2)))
    ok_value(instance_service.reset_chat_permissions(first, [permission_record(7)]))
    ok_value(
        instance_service.reset_chat_permissions(
            second, [permission_record(7), permission_record(8)]
        )
    )

    found = ok_value(instance_service.find_permissions(PermissionFilter(user_id=7)))

    assert sorted(p.chat_id for p in found) == [1, 2]
    assert len(ok_value(instance_service.find_permissions())) == 3


def test_sponsor_lifecycle(instance_service: InstanceService) -> None:
    sponsor = ok_value(instance_service.create_sponsor(sponsor_params("Acme")))
    renamed = ok_value(instance_service.update_sponsor(sponsor, {"title": "Acme Inc"}))

    found = ok_value(instance_service.find_sponsor(SponsorFilter(uuid=sponsor.uuid)))

    assert found is not None
    assert found.id == sponsor.id
    assert found.title == renamed.title == "Acme Inc"

    ok_value(instance_service.delete_sponsor(sponsor))
    assert ok_value(instance_service.find_sponsor(SponsorFilter(uuid=sponsor.uuid))) is None


def test_find_sponsors_most_recent_first(instance_service: InstanceService) -> None:
    older = ok_value(instance_service.create_sponsor(sponsor_params("Older")))
    ok_value(instance_service.create_sponsor(sponsor_params("Newer")))
    ok_value(instance_service.update_sponsor(older, {"contact": "mail@older.example"}))

    titles = [sponsor.title for sponsor in ok_value(instance_service.find_sponsors())]

    assert titles == ["Older", "Newer"]


def test_create_sponsor_requires_title(instance_service: InstanceService) -> None:
    error = err_value(instance_service.create_sponsor({"homepage": "https://x.example"}))

    assert isinstance(error, ValidationError)
    assert error.fields == ("title",)


@pytest.mark.parametrize("flag", ["true", "y", "t", 1])
def test_create_sponsorship_history_derives_reached_at(
    instance_service: InstanceService, clock: FixedClock, flag: object
) -> None:
    history = ok_value(
        instance_service.create_sponsorship_history(history_params(has_reached=flag))
    )

    assert history.has_reached is True
    assert history.reached_at == clock.now
    assert history.sponsor_id is None


def test_create_with_sponsor_requires_sponsor_payload(instance_service: InstanceService) -> None:
    error = err_value(instance_service.create_sponsorship_history_with_sponsor(history_params()))

    assert isinstance(error, ValidationError)
    assert error.fields == ("sponsor",)


def test_create_with_sponsor(instance_service: InstanceService) -> None:
    history = ok_value(
        instance_service.create_sponsorship_history_with_sponsor(
            {**history_params(), "sponsor": sponsor_params("Patron")}
        )
    )

    assert history.sponsor is not None
    assert history.sponsor.title == "Patron"
    assert history.sponsor_id == history.sponsor.id


def test_update_with_create_sponsor(instance_service: InstanceService) -> None:
    history = ok_value(instance_service.create_sponsorship_history(history_params(amount=10)))

    updated = ok_value(
        instance_service.update_sponsorship_history_with_create_sponsor(
            history, {"amount": 20, "sponsor": sponsor_params("Late Patron")}
        )
    )

    assert updated.id == history.id
    assert updated.amount == 20
    assert updated.sponsor is not None
    assert updated.sponsor_id == updated.sponsor.id


def test_reached_sponsorship_history(
    instance_service: InstanceService, clock: FixedClock
) -> None:
    history = ok_value(instance_service.create_sponsorship_history(history_params()))

    reached = ok_value(instance_service.reached_sponsorship_history(history))

    assert reached.has_reached is True
    assert reached.reached_at == clock.now


def test_update_sponsorship_history_overwrites_timestamp_when_missing(
    instance_service: InstanceService, clock: FixedClock
) -> None:
    earlier = datetime(2020, 1, 1, tzinfo=UTC)
    history = ok_value(
        instance_service.create_sponsorship_history(
            history_params(has_reached=True, reached_at=earlier)
        )
    )

    updated = ok_value(instance_service.update_sponsorship_history(history, {"has_reached": True}))

    assert updated.reached_at == clock.now


def test_deleting_sponsor_detaches_histories(instance_service: InstanceService) -> None:
    history = ok_value(
        instance_service.create_sponsorship_history_with_sponsor(
            {**history_params(), "sponsor": sponsor_params()}
        )
    )
    assert history.sponsor is not None

    ok_value(instance_service.delete_sponsor(history.sponsor))

    (stored,) = ok_value(instance_service.find_sponsorship_histories())
    assert stored.id == history.id
    assert stored.sponsor_id is None


def test_find_sponsorship_histories_filters(instance_service: InstanceService) -> None:
    clock_values = [
        datetime(2024, 1, 1, tzinfo=UTC),
        datetime(2024, 3, 1, tzinfo=UTC),
    ]
    early = ok_value(
        instance_service.create_sponsorship_history(
            history_params(has_reached=True, reached_at=clock_values[0])
        )
    )
    late = ok_value(
        instance_service.create_sponsorship_history_with_sponsor(
            {
                **history_params(has_reached=True, reached_at=clock_values[1]),
                "sponsor": sponsor_params(),
            }
        )
    )
    pending = ok_value(instance_service.create_sponsorship_history(history_params()))
    hidden = ok_value(instance_service.create_sponsorship_history(history_params(hidden=True)))

    reached = ok_value(
        instance_service.find_sponsorship_histories(SponsorshipHistoryFilter(has_reached=True))
    )
    visible = ok_value(
        instance_service.find_sponsorship_histories(
            SponsorshipHistoryFilter(display=Display.NOT_HIDDEN)
        )
    )
    only_hidden = ok_value(
        instance_service.find_sponsorship_histories(
            SponsorshipHistoryFilter(display=Display.HIDDEN)
        )
    )
    nulls_first = ok_value(
        instance_service.find_sponsorship_histories(
            SponsorshipHistoryFilter(
                display=Display.NOT_HIDDEN,
                order_by=(Ordering("reached_at", SortDirection.DESC_NULLS_FIRST),),
            )
        )
    )
    preloaded = ok_value(
        instance_service.find_sponsorship_histories(
            SponsorshipHistoryFilter(has_reached=True, preload_sponsor=True)
        )
    )

    assert [h.id for h in reached] == [late.id, early.id]
    assert {h.id for h in visible} == {early.id, late.id, pending.id}
    assert [h.id for h in only_hidden] == [hidden.id]
    assert [h.id for h in nulls_first] == [pending.id, late.id, early.id]
    assert preloaded[0].sponsor is not None
    assert preloaded[0].sponsor.id == late.sponsor_id
    assert preloaded[1].sponsor is None


def test_typed_rejects_entity_of_another_kind() -> None:
    term = Term(id=TERM_ID)

    assert _typed(Term, Ok(term)) == Ok(term)
    with pytest.raises(TypeError, match="Expected Chat, got Term"):
        _typed(Chat, Ok(term))


def test_typed_passes_errors_through() -> None:
    failure: Err[NotFoundError] = Err(NotFoundError(EntityKind.CHAT, 1))

    assert _typed(Chat, failure) is failure

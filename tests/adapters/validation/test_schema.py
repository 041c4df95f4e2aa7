from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest

from chatwarden.adapters.validation import PydanticValidator
from chatwarden.domain.errors import ValidationError
from chatwarden.domain.model import ChatType, EntityKind
from tests.helpers.instances import err_value, history_params, ok_value


@pytest.fixture
def validator() -> PydanticValidator:
    return PydanticValidator()


def test_chat_blank_strings_become_none(validator: PydanticValidator) -> None:
    fields = ok_value(
        validator.validate(EntityKind.CHAT, {"id": 1, "type": "group", "title": "  ", "bogus": 1})
    )

    assert fields["type"] is ChatType.GROUP
    assert fields["title"] is None
    assert "bogus" not in fields


def test_term_defaults_to_singleton_id(validator: PydanticValidator) -> None:
    fields = ok_value(validator.validate(EntityKind.TERM, {}))

    assert fields == {"id": 1, "content": None}


def test_permission_flags_default(validator: PydanticValidator) -> None:
    fields = ok_value(validator.validate(EntityKind.PERMISSION, {"chat_id": 1, "user_id": 2}))

    assert fields["readable"] is True
    assert fields["writable"] is False
    assert fields["customized"] is False


def test_sponsor_title_is_stripped_and_required(validator: PydanticValidator) -> None:
    fields = ok_value(validator.validate(EntityKind.SPONSOR, {"title": "  Acme  "}))
    error = err_value(validator.validate(EntityKind.SPONSOR, {"title": "   "}))

    assert fields["title"] == "Acme"
    assert isinstance(error, ValidationError)
    assert error.fields == ("title",)


def test_history_amount_must_be_positive(validator: PydanticValidator) -> None:
    error = err_value(validator.validate(EntityKind.SPONSORSHIP_HISTORY, history_params(amount=0)))

    assert isinstance(error, ValidationError)
    assert error.fields == ("amount",)


def test_reached_history_requires_timestamp(validator: PydanticValidator) -> None:
    error = err_value(
        validator.validate(EntityKind.SPONSORSHIP_HISTORY, history_params(has_reached=True))
    )

    assert isinstance(error, ValidationError)
    assert error.fields == ("reached_at",)


def test_reached_at_is_normalised_to_utc(validator: PydanticValidator) -> None:
    plus_two = timezone(timedelta(hours=2))
    fields = ok_value(
        validator.validate(
            EntityKind.SPONSORSHIP_HISTORY,
            history_params(has_reached=True, reached_at=datetime(2024, 1, 1, 12, tzinfo=plus_two)),
        )
    )
    naive = ok_value(
        validator.validate(
            EntityKind.SPONSORSHIP_HISTORY,
            history_params(has_reached=True, reached_at="2024-01-01T10:00:00"),
        )
    )

    assert fields["reached_at"] == datetime(2024, 1, 1, 10, tzinfo=UTC)
    assert naive["reached_at"] == datetime(2024, 1, 1, 10, tzinfo=UTC)

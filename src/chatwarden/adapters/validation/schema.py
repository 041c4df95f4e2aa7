"""Pydantic models describing writable instance fields."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from chatwarden.domain.model import TERM_ID, ChatType, EntityKind


def _strip(value: object) -> object:
    return value.strip() if isinstance(value, str) else value


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class InstanceBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class TermSchema(InstanceBaseModel):
    id: int = TERM_ID
    content: str | None = None


class ChatSchema(InstanceBaseModel):
    id: int
    type: ChatType
    title: str | None = None
    small_photo_id: str | None = None
    big_photo_id: str | None = None
    username: str | None = None
    description: str | None = None
    invite_link: str | None = None
    is_take_over: bool = False
    left: bool | None = None

    normalize_optional = field_validator(
        "title",
        "small_photo_id",
        "big_photo_id",
        "username",
        "description",
        "invite_link",
        mode="before",
    )(_blank_to_none)


class PermissionSchema(InstanceBaseModel):
    chat_id: int
    user_id: int
    tg_is_owner: bool = False
    tg_can_promote_members: bool = False
    tg_can_restrict_members: bool = False
    readable: bool = True
    writable: bool = False
    customized: bool = False


class SponsorSchema(InstanceBaseModel):
    title: str = Field(min_length=1)
    avatar: str | None = None
    homepage: str | None = None
    introduction: str | None = None
    contact: str | None = None

    normalize_title = field_validator("title", mode="before")(_strip)
    normalize_optional = field_validator(
        "avatar", "homepage", "introduction", "contact", mode="before"
    )(_blank_to_none)


class SponsorshipHistorySchema(InstanceBaseModel):
    sponsor_id: int | None = None
    expected_to: str | None = None
    amount: int = Field(gt=0)
    has_reached: bool = False
    reached_at: datetime | None = Field(default=None, validate_default=True)
    hidden: bool | None = None

    normalize_optional = field_validator("expected_to", "reached_at", mode="before")(
        _blank_to_none
    )

    @field_validator("reached_at")
    @classmethod
    def check_reached_at(cls, value: datetime | None, info: ValidationInfo) -> datetime | None:
        if value is None:
            if info.data.get("has_reached"):
                raise ValueError("required once has_reached is set")
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)


SCHEMA_BY_KIND: dict[EntityKind, type[InstanceBaseModel]] = {
    EntityKind.TERM: TermSchema,
    EntityKind.CHAT: ChatSchema,
    EntityKind.PERMISSION: PermissionSchema,
    EntityKind.SPONSOR: SponsorSchema,
    EntityKind.SPONSORSHIP_HISTORY: SponsorshipHistorySchema,
}

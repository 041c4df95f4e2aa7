"""Initial instances schema.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18 09:00:00

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column[object]]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "term",
        sa.Column("id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_term"),
    )
    op.create_table(
        "chat",
        sa.Column("id", sa.BigInteger(), autoincrement=False, nullable=False),
        sa.Column("type", sa.String(length=10), nullable=False),
        sa.Column("title", sa.String(), nullable=True),
        sa.Column("small_photo_id", sa.String(), nullable=True),
        sa.Column("big_photo_id", sa.String(), nullable=True),
        sa.Column("username", sa.String(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("invite_link", sa.String(), nullable=True),
        sa.Column("is_take_over", sa.Boolean(), nullable=False),
        sa.Column("left", sa.Boolean(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_chat"),
    )
    op.create_table(
        "permission",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("chat_id", sa.BigInteger(), nullable=False),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("tg_is_owner", sa.Boolean(), nullable=False),
        sa.Column("tg_can_promote_members", sa.Boolean(), nullable=False),
        sa.Column("tg_can_restrict_members", sa.Boolean(), nullable=False),
        sa.Column("readable", sa.Boolean(), nullable=False),
        sa.Column("writable", sa.Boolean(), nullable=False),
        sa.Column("customized", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["chat_id"],
            ["chat.id"],
            name="fk_permission_chat_id_chat",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_permission"),
        sa.UniqueConstraint("chat_id", "user_id", name="uq_permission_chat_user"),
    )
    op.create_index("ix_permission_chat_id", "permission", ["chat_id"])
    op.create_table(
        "sponsor",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("uuid", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("avatar", sa.String(), nullable=True),
        sa.Column("homepage", sa.String(), nullable=True),
        sa.Column("introduction", sa.Text(), nullable=True),
        sa.Column("contact", sa.String(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_sponsor"),
        sa.UniqueConstraint("uuid", name="uq_sponsor_uuid"),
    )
    op.create_table(
        "sponsorship_history",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("sponsor_id", sa.Integer(), nullable=True),
        sa.Column("expected_to", sa.String(), nullable=True),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("has_reached", sa.Boolean(), nullable=False),
        sa.Column("reached_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("hidden", sa.Boolean(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["sponsor_id"],
            ["sponsor.id"],
            name="fk_sponsorship_history_sponsor_id_sponsor",
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_sponsorship_history"),
    )
    op.create_index(
        "ix_sponsorship_history_sponsor_id", "sponsorship_history", ["sponsor_id"]
    )


def downgrade() -> None:
    op.drop_index("ix_sponsorship_history_sponsor_id", table_name="sponsorship_history")
    op.drop_table("sponsorship_history")
    op.drop_table("sponsor")
    op.drop_index("ix_permission_chat_id", table_name="permission")
    op.drop_table("permission")
    op.drop_table("chat")
    op.drop_table("term")

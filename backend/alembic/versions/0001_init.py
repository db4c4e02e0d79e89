"""init

Revision ID: 0001_init
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(length=128), nullable=False),
        sa.Column("near_wallet", sa.String(length=128), nullable=False),
        sa.Column("near_address", sa.String(length=256), nullable=False),
        sa.Column("is_admin", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("ux_users_username", "users", ["username"], unique=True)
    op.create_index("ux_users_near_wallet", "users", ["near_wallet"], unique=True)

    op.create_table(
        "content",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("link", sa.String(length=2048), nullable=True),
        sa.Column("image_url", sa.String(length=2048), nullable=True),
        sa.Column("categories", postgresql.JSONB(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("ai_analysis", postgresql.JSONB(), nullable=True),
        sa.Column("approved", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("rejected", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("token_issued", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("token_id", sa.String(length=128), nullable=True),
        sa.CheckConstraint("NOT (approved AND rejected)", name="ck_content_single_decision"),
    )
    op.create_index("ix_content_created_at", "content", ["created_at"])
    op.create_index("ix_content_user_id", "content", ["user_id"])

    op.create_table(
        "soulbound_tokens",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("content_id", sa.Integer(), sa.ForeignKey("content.id", ondelete="SET NULL"), nullable=True),
        sa.Column("token_id", sa.String(length=128), nullable=False),
        sa.Column("token_type", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=False),
        sa.Column("metadata", postgresql.JSONB(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("ix_soulbound_tokens_user_id", "soulbound_tokens", ["user_id"])
    # At most one token per content item.
    op.create_index("ux_soulbound_tokens_content_id", "soulbound_tokens", ["content_id"], unique=True)


def downgrade() -> None:
    op.drop_table("soulbound_tokens")
    op.drop_table("content")
    op.drop_table("users")

"""initial schema: users, push tokens, service history, account preferences

Revision ID: 5f2c9a1d7e30
Revises:
Create Date: 2026-10-19 10:12:41.118204

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "5f2c9a1d7e30"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=True),
        sa.Column("google_id", sa.String(255), nullable=True),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("profile_image_url", sa.String(1000), nullable=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="client"),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_google_id", "users", ["google_id"], unique=True)

    op.create_table(
        "push_tokens",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("expo_push_token", sa.String(255), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "expo_push_token", name="uq_push_tokens_user_token"),
    )
    op.create_index("ix_push_tokens_user_id", "push_tokens", ["user_id"])
    op.create_index("ix_push_tokens_expo_push_token", "push_tokens", ["expo_push_token"])

    op.create_table(
        "service_history",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("vehicle", sa.String(200), nullable=False),
        sa.Column("service_type", sa.String(100), nullable=False),
        sa.Column("address", sa.String(500), nullable=False),
        sa.Column("scheduled_for", sa.DateTime(timezone=True), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="scheduled"),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_service_history_user_id", "service_history", ["user_id"])
    op.create_index("ix_service_history_status", "service_history", ["status"])
    op.create_index("ix_service_history_scheduled_for", "service_history", ["scheduled_for"])

    op.create_table(
        "account_preferences",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("notifications_enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("email_updates", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("preferred_vehicle", sa.String(200), nullable=True),
        sa.Column("payment_method_last4", sa.String(4), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("user_id", name="uq_account_preferences_user_id"),
    )


def downgrade() -> None:
    op.drop_table("account_preferences")
    op.drop_index("ix_service_history_scheduled_for", table_name="service_history")
    op.drop_index("ix_service_history_status", table_name="service_history")
    op.drop_index("ix_service_history_user_id", table_name="service_history")
    op.drop_table("service_history")
    op.drop_index("ix_push_tokens_expo_push_token", table_name="push_tokens")
    op.drop_index("ix_push_tokens_user_id", table_name="push_tokens")
    op.drop_table("push_tokens")
    op.drop_index("ix_users_google_id", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")

"""create subscriptions and cancellations

Revision ID: 20261019_create_cancellations
Revises:
"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# Alembic identifiers
revision = "20261019_create_cancellations"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "subscriptions",
        sa.Column("id", sa.String(100), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("monthly_price", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(32), nullable=False, server_default="active"),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_subscriptions")),
    )
    op.create_index(op.f("ix_subscriptions_user_id"), "subscriptions", ["user_id"])

    op.create_table(
        "cancellations",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("subscription_id", sa.String(100), nullable=False),
        sa.Column("downsell_variant", sa.String(1), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("accepted_downsell", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_cancellations")),
        sa.UniqueConstraint("user_id", name=op.f("uq_cancellations_user_id")),
        sa.CheckConstraint(
            "downsell_variant IN ('A', 'B')",
            name=op.f("ck_cancellations_downsell_variant"),
        ),
    )


def downgrade():
    op.drop_table("cancellations")
    op.drop_index(op.f("ix_subscriptions_user_id"), table_name="subscriptions")
    op.drop_table("subscriptions")

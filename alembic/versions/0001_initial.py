"""monitors and pings

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18
"""
from __future__ import annotations

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "monitors",
        sa.Column("id", sa.String(length=64), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("schedule", sa.String(length=32), nullable=False),
        sa.Column("grace_seconds", sa.Integer(), nullable=False),
        sa.Column("alert_webhook", sa.String(length=2048), nullable=True),
        sa.Column("alert_email", sa.String(length=320), nullable=True),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
        sa.Column("last_ping", sa.BigInteger(), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("failure_count", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_index("ix_monitors_created_at", "monitors", ["created_at"], unique=False)
    op.create_index("ix_monitors_status", "monitors", ["status"], unique=False)

    op.create_table(
        "pings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True, nullable=False),
        sa.Column(
            "monitor_id",
            sa.String(length=64),
            sa.ForeignKey("monitors.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("timestamp", sa.BigInteger(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
    )
    op.create_index(
        "ix_pings_monitor_id_timestamp",
        "pings",
        ["monitor_id", "timestamp"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_pings_monitor_id_timestamp", table_name="pings")
    op.drop_table("pings")
    op.drop_index("ix_monitors_status", table_name="monitors")
    op.drop_index("ix_monitors_created_at", table_name="monitors")
    op.drop_table("monitors")

"""create manual_inputs, manual_channel_inputs, manual_channel_snapshots, manual_snapshots

Revision ID: 20261017_0001
Revises:
Create Date: 2026-10-17 00:00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision = "20261017_0001"
down_revision = None
branch_labels = None
depends_on = None

_MONEY = sa.Numeric(precision=18, scale=4)
_TOTAL_MONEY = sa.Numeric(precision=24, scale=4)


def _owner_column() -> sa.Column:
    return sa.Column(
        "owner_id",
        sa.String(length=64),
        nullable=False,
        comment="Owning company identifier",
    )


def _timestamp_columns() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    # ---------------------------------------------------------------------------
    # manual_inputs
    # One row per reporting period. Nullable numerics keep "not supplied".
    # ---------------------------------------------------------------------------
    op.create_table(
        "manual_inputs",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        _owner_column(),
        sa.Column("period_type", sa.String(length=16), nullable=False,
                  comment="7days, 30days, 90days"),
        sa.Column("granularity", sa.String(length=16), nullable=False,
                  comment="day, week, month"),
        sa.Column("period_index", sa.Integer(), nullable=False),
        sa.Column("period_date", sa.Date(), nullable=True),
        sa.Column("period_label", sa.String(length=64), nullable=False),
        sa.Column("sessions", sa.Integer(), nullable=True),
        sa.Column("users", sa.Integer(), nullable=True),
        sa.Column("clicks", sa.Integer(), nullable=True),
        sa.Column("impressions", sa.Integer(), nullable=True),
        sa.Column("organic_sessions", sa.Integer(), nullable=True),
        sa.Column("paid_sessions", sa.Integer(), nullable=True),
        sa.Column("leads", sa.Integer(), nullable=True),
        sa.Column("deals", sa.Integer(), nullable=True),
        sa.Column("sales", sa.Integer(), nullable=True),
        sa.Column("repeat_sales", sa.Integer(), nullable=True),
        sa.Column("revenue", _MONEY, nullable=True),
        sa.Column("ad_spend", _MONEY, nullable=True),
        sa.Column("total_budget", _MONEY, nullable=True),
        sa.Column("cogs", _MONEY, nullable=True),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id", name="pk_manual_inputs"),
    )
    op.create_index("ix_manual_inputs_owner_id", "manual_inputs", ["owner_id"], unique=False)
    op.create_index(
        "ix_manual_inputs_owner_period",
        "manual_inputs",
        ["owner_id", "period_index"],
        unique=False,
    )

    # ---------------------------------------------------------------------------
    # manual_channel_inputs
    # ---------------------------------------------------------------------------
    op.create_table(
        "manual_channel_inputs",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        _owner_column(),
        sa.Column("period_type", sa.String(length=16), nullable=False),
        sa.Column("period_index", sa.Integer(), nullable=False),
        sa.Column("period_label", sa.String(length=64), nullable=False),
        sa.Column("channel_name", sa.String(length=120), nullable=False),
        sa.Column("channel_type", sa.String(length=16), nullable=False,
                  comment="social, search, organic, direct, custom"),
        sa.Column("sessions", sa.Integer(), nullable=True),
        sa.Column("clicks", sa.Integer(), nullable=True),
        sa.Column("impressions", sa.Integer(), nullable=True),
        sa.Column("leads", sa.Integer(), nullable=True),
        sa.Column("ad_spend", _MONEY, nullable=True),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id", name="pk_manual_channel_inputs"),
    )
    op.create_index(
        "ix_manual_channel_inputs_owner_id",
        "manual_channel_inputs",
        ["owner_id"],
        unique=False,
    )
    op.create_index(
        "ix_manual_channel_inputs_owner_channel",
        "manual_channel_inputs",
        ["owner_id", "channel_name", "period_index"],
        unique=False,
    )

    # ---------------------------------------------------------------------------
    # manual_channel_snapshots
    # ---------------------------------------------------------------------------
    op.create_table(
        "manual_channel_snapshots",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        _owner_column(),
        sa.Column("channel_name", sa.String(length=120), nullable=False),
        sa.Column("channel_type", sa.String(length=16), nullable=False),
        sa.Column("sessions", sa.BigInteger(), nullable=False),
        sa.Column("clicks", sa.BigInteger(), nullable=False),
        sa.Column("impressions", sa.BigInteger(), nullable=False),
        sa.Column("leads", sa.BigInteger(), nullable=False),
        sa.Column("sales", sa.BigInteger(), nullable=False),
        sa.Column("revenue", _TOTAL_MONEY, nullable=False),
        sa.Column("ad_spend", _TOTAL_MONEY, nullable=False),
        sa.Column("cpc", sa.Float(), nullable=True),
        sa.Column("cpl", sa.Float(), nullable=True),
        sa.Column("cpm", sa.Float(), nullable=True),
        sa.Column("cr", sa.Float(), nullable=True),
        sa.Column("share_of_traffic", sa.Float(), nullable=False),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id", name="pk_manual_channel_snapshots"),
    )
    op.create_index(
        "ix_manual_channel_snapshots_owner_id",
        "manual_channel_snapshots",
        ["owner_id"],
        unique=False,
    )

    # ---------------------------------------------------------------------------
    # manual_snapshots
    # One row per owner; the unique constraint drives last-write-wins upserts.
    # ---------------------------------------------------------------------------
    op.create_table(
        "manual_snapshots",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        _owner_column(),
        sa.Column("period_type", sa.String(length=16), nullable=False),
        sa.Column("granularity", sa.String(length=16), nullable=False),
        sa.Column("currency", sa.String(length=8), nullable=False),
        sa.Column("timezone", sa.String(length=64), nullable=False),
        sa.Column("data_mode", sa.String(length=32), nullable=False),
        sa.Column("gate_status", sa.String(length=16), nullable=False),
        sa.Column("data_quality_score", sa.Integer(), nullable=False),
        sa.Column(
            "metrics",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            comment="Derived KPIs keyed by metric name with value and unit",
        ),
        sa.Column(
            "snapshot",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            comment="Full serialized snapshot",
        ),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id", name="pk_manual_snapshots"),
        sa.UniqueConstraint("owner_id", name="uq_manual_snapshots_owner_id"),
    )
    op.create_index(
        "ix_manual_snapshots_owner_id",
        "manual_snapshots",
        ["owner_id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_manual_snapshots_owner_id", table_name="manual_snapshots")
    op.drop_table("manual_snapshots")
    op.drop_index("ix_manual_channel_snapshots_owner_id", table_name="manual_channel_snapshots")
    op.drop_table("manual_channel_snapshots")
    op.drop_index("ix_manual_channel_inputs_owner_channel", table_name="manual_channel_inputs")
    op.drop_index("ix_manual_channel_inputs_owner_id", table_name="manual_channel_inputs")
    op.drop_table("manual_channel_inputs")
    op.drop_index("ix_manual_inputs_owner_period", table_name="manual_inputs")
    op.drop_index("ix_manual_inputs_owner_id", table_name="manual_inputs")
    op.drop_table("manual_inputs")

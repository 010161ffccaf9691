"""
db/models/manual_input.py

Persisted manual funnel input and its computed snapshot.

Every table is owner-scoped and replaced wholesale on each submission:
rows are deleted and re-inserted, and the single ``manual_snapshots`` row
per owner is upserted.  No history is retained.
"""

from __future__ import annotations

import uuid
from datetime import date
from typing import Any

from sqlalchemy import BigInteger, Date, Float, Index, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, OwnerScopedMixin, TimestampMixin

_MONEY = Numeric(18, 4)
_TOTAL_MONEY = Numeric(24, 4)
SNAPSHOT_OWNER_CONSTRAINT = "uq_manual_snapshots_owner_id"


class ManualInput(Base, OwnerScopedMixin, TimestampMixin):
    """
    One manually entered reporting period.

    Nullable numeric columns keep the "not supplied" vs "supplied as zero"
    distinction of the submitted row.
    """

    __tablename__ = "manual_inputs"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    period_type: Mapped[str] = mapped_column(String(16), nullable=False, comment="7days, 30days, 90days")
    granularity: Mapped[str] = mapped_column(String(16), nullable=False, comment="day, week, month")
    period_index: Mapped[int] = mapped_column(Integer, nullable=False)
    period_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    period_label: Mapped[str] = mapped_column(String(64), nullable=False, default="")

    sessions: Mapped[int | None] = mapped_column(Integer, nullable=True)
    users: Mapped[int | None] = mapped_column(Integer, nullable=True)
    clicks: Mapped[int | None] = mapped_column(Integer, nullable=True)
    impressions: Mapped[int | None] = mapped_column(Integer, nullable=True)
    organic_sessions: Mapped[int | None] = mapped_column(Integer, nullable=True)
    paid_sessions: Mapped[int | None] = mapped_column(Integer, nullable=True)
    leads: Mapped[int | None] = mapped_column(Integer, nullable=True)
    deals: Mapped[int | None] = mapped_column(Integer, nullable=True)
    sales: Mapped[int | None] = mapped_column(Integer, nullable=True)
    repeat_sales: Mapped[int | None] = mapped_column(Integer, nullable=True)
    revenue: Mapped[float | None] = mapped_column(_MONEY, nullable=True)
    ad_spend: Mapped[float | None] = mapped_column(_MONEY, nullable=True)
    total_budget: Mapped[float | None] = mapped_column(_MONEY, nullable=True)
    cogs: Mapped[float | None] = mapped_column(_MONEY, nullable=True)

    __table_args__ = (
        Index("ix_manual_inputs_owner_period", "owner_id", "period_index"),
    )


class ManualChannelInput(Base, OwnerScopedMixin, TimestampMixin):
    """One channel's traffic and spend for one period."""

    __tablename__ = "manual_channel_inputs"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    period_type: Mapped[str] = mapped_column(String(16), nullable=False)
    period_index: Mapped[int] = mapped_column(Integer, nullable=False)
    period_label: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    channel_name: Mapped[str] = mapped_column(String(120), nullable=False)
    channel_type: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        comment="social, search, organic, direct, custom",
    )
    sessions: Mapped[int | None] = mapped_column(Integer, nullable=True)
    clicks: Mapped[int | None] = mapped_column(Integer, nullable=True)
    impressions: Mapped[int | None] = mapped_column(Integer, nullable=True)
    leads: Mapped[int | None] = mapped_column(Integer, nullable=True)
    ad_spend: Mapped[float | None] = mapped_column(_MONEY, nullable=True)

    __table_args__ = (
        Index("ix_manual_channel_inputs_owner_channel", "owner_id", "channel_name", "period_index"),
    )


class ManualChannelSnapshot(Base, OwnerScopedMixin, TimestampMixin):
    """Per-channel totals and unit costs from the latest submission."""

    __tablename__ = "manual_channel_snapshots"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    channel_name: Mapped[str] = mapped_column(String(120), nullable=False)
    channel_type: Mapped[str] = mapped_column(String(16), nullable=False)
    sessions: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    clicks: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    impressions: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    leads: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    sales: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    revenue: Mapped[float] = mapped_column(_TOTAL_MONEY, nullable=False, default=0)
    ad_spend: Mapped[float] = mapped_column(_TOTAL_MONEY, nullable=False, default=0)
    cpc: Mapped[float | None] = mapped_column(Float, nullable=True)
    cpl: Mapped[float | None] = mapped_column(Float, nullable=True)
    cpm: Mapped[float | None] = mapped_column(Float, nullable=True)
    cr: Mapped[float | None] = mapped_column(Float, nullable=True)
    share_of_traffic: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)


class ManualSnapshot(Base, OwnerScopedMixin, TimestampMixin):
    """
    Latest computed snapshot for one owner.

    ``snapshot`` holds the full engine output as produced by
    ``Snapshot.to_dict()``; ``metrics`` holds the unit-annotated KPI
    payload, e.g.::

        {
            "roas": {"value": 5.0,   "unit": "ratio"},
            "cac":  {"value": 100.0, "unit": "currency"},
            "ltv":  {"value": None,  "unit": "currency"}
        }

    The unique constraint on ``owner_id`` drives last-write-wins upserts.
    """

    __tablename__ = "manual_snapshots"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    period_type: Mapped[str] = mapped_column(String(16), nullable=False)
    granularity: Mapped[str] = mapped_column(String(16), nullable=False)
    currency: Mapped[str] = mapped_column(String(8), nullable=False)
    timezone: Mapped[str] = mapped_column(String(64), nullable=False)
    data_mode: Mapped[str] = mapped_column(String(32), nullable=False)
    gate_status: Mapped[str] = mapped_column(String(16), nullable=False)
    data_quality_score: Mapped[int] = mapped_column(Integer, nullable=False)
    metrics: Mapped[dict[str, Any]] = mapped_column(
        JSONB,
        nullable=False,
        comment="Derived KPIs keyed by metric name with value and unit",
    )
    snapshot: Mapped[dict[str, Any]] = mapped_column(
        JSONB,
        nullable=False,
        comment="Full serialized snapshot",
    )

    __table_args__ = (
        UniqueConstraint("owner_id", name=SNAPSHOT_OWNER_CONSTRAINT),
    )

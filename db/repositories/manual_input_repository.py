"""
db/repositories/manual_input_repository.py

Persistence layer for manual funnel input and its snapshot.

All methods are transaction-safe. The caller controls commit/rollback;
this repository never commits on its own.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from app.domain.manual_input import (
    CHANNEL_ROW_NUMERIC_FIELDS,
    METRIC_ROW_NUMERIC_FIELDS,
    ChannelRow,
    MetricRow,
    Snapshot,
)
from db.models.manual_input import (
    SNAPSHOT_OWNER_CONSTRAINT,
    ManualChannelInput,
    ManualChannelSnapshot,
    ManualInput,
    ManualSnapshot,
)
from db.repositories.types import StoredManualInput
from kpi.funnel import METRIC_UNITS

logger = logging.getLogger(__name__)

_CHANNEL_SNAPSHOT_FIELDS = (
    "channel_name",
    "channel_type",
    "sessions",
    "clicks",
    "impressions",
    "leads",
    "sales",
    "revenue",
    "ad_spend",
    "cpc",
    "cpl",
    "cpm",
    "cr",
    "share_of_traffic",
)


class ManualInputRepository:
    """
    Repository for replacing and reading an owner's manual input.

    Replace semantics: ``save`` removes every previously stored input row,
    channel row and channel snapshot for the owner before inserting the new
    ones, and upserts the single ``manual_snapshots`` row on
    ``owner_id``.  Nothing is merged with earlier submissions.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def save(
        self,
        owner_id: str,
        rows: Sequence[MetricRow],
        channel_rows: Sequence[ChannelRow],
        snapshot: Snapshot,
    ) -> ManualSnapshot:
        """
        Replace the owner's stored input and snapshot.

        Parameters
        ----------
        owner_id:
            Owning company identifier.
        rows:
            Validated metric rows, one per reporting period.
        channel_rows:
            Validated channel rows; may be empty.
        snapshot:
            Engine output computed from ``rows`` and ``channel_rows``.

        Returns
        -------
        ManualSnapshot
            The upserted snapshot row (flushed, not committed).
        """
        for model in (ManualInput, ManualChannelInput, ManualChannelSnapshot):
            self._session.execute(delete(model).where(model.owner_id == owner_id))

        self._session.add_all(
            [
                _metric_row_to_model(owner_id, snapshot, row)
                for row in rows
            ]
        )
        self._session.add_all(
            [
                _channel_row_to_model(owner_id, snapshot.period_type, row)
                for row in channel_rows
            ]
        )
        self._session.add_all(
            [
                ManualChannelSnapshot(
                    owner_id=owner_id,
                    **{name: getattr(channel, name) for name in _CHANNEL_SNAPSHOT_FIELDS},
                )
                for channel in snapshot.channels
            ]
        )
        self._session.flush()

        values = {
            "period_type": snapshot.period_type,
            "granularity": snapshot.granularity,
            "currency": snapshot.currency,
            "timezone": snapshot.timezone,
            "data_mode": snapshot.data_mode,
            "gate_status": snapshot.gate_status,
            "data_quality_score": snapshot.data_quality_score,
            "metrics": snapshot.metrics.to_payload(METRIC_UNITS),
            "snapshot": snapshot.to_dict(),
        }
        stmt = (
            insert(ManualSnapshot)
            .values(id=uuid.uuid4(), owner_id=owner_id, **values)
            .on_conflict_do_update(
                constraint=SNAPSHOT_OWNER_CONSTRAINT,
                set_={**values, "updated_at": _now_utc()},
            )
            .returning(ManualSnapshot)
        )
        stored: ManualSnapshot = self._session.scalars(stmt).one()
        logger.debug(
            "Replaced manual input owner=%s rows=%d channel_rows=%d",
            owner_id,
            len(rows),
            len(channel_rows),
        )
        return stored

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_snapshot(self, owner_id: str) -> ManualSnapshot | None:
        """Return the owner's snapshot row, or ``None`` if nothing is stored."""
        stmt = select(ManualSnapshot).where(ManualSnapshot.owner_id == owner_id)
        return self._session.scalars(stmt).one_or_none()

    def load(self, owner_id: str) -> StoredManualInput | None:
        """
        Return the owner's stored rows and snapshot, or ``None`` when the
        owner has never submitted.

        Metric rows are ordered by ``period_index``; channel rows by
        ``(channel_name, period_index)``.
        """
        stored = self.get_snapshot(owner_id)
        if stored is None:
            return None

        input_rows = self._session.scalars(
            select(ManualInput)
            .where(ManualInput.owner_id == owner_id)
            .order_by(ManualInput.period_index)
        ).all()
        channel_rows = self._session.scalars(
            select(ManualChannelInput)
            .where(ManualChannelInput.owner_id == owner_id)
            .order_by(ManualChannelInput.channel_name, ManualChannelInput.period_index)
        ).all()

        return StoredManualInput(
            owner_id=owner_id,
            period_type=stored.period_type,
            granularity=stored.granularity,
            rows=tuple(_model_to_metric_row(row) for row in input_rows),
            channel_rows=tuple(_model_to_channel_row(row) for row in channel_rows),
            snapshot=dict(stored.snapshot or {}),
            metrics=dict(stored.metrics or {}),
            updated_at=stored.updated_at,
        )


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _plain(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    return value


def _metric_row_to_model(owner_id: str, snapshot: Snapshot, row: MetricRow) -> ManualInput:
    return ManualInput(
        owner_id=owner_id,
        period_type=snapshot.period_type,
        granularity=snapshot.granularity,
        period_index=row.period_index,
        period_date=row.period_date,
        period_label=row.period_label,
        **{name: getattr(row, name) for name in METRIC_ROW_NUMERIC_FIELDS},
    )


def _channel_row_to_model(owner_id: str, period_type: str, row: ChannelRow) -> ManualChannelInput:
    return ManualChannelInput(
        owner_id=owner_id,
        period_type=period_type,
        period_index=row.period_index,
        period_label=row.period_label,
        channel_name=row.channel_name,
        channel_type=row.channel_type,
        **{name: getattr(row, name) for name in CHANNEL_ROW_NUMERIC_FIELDS},
    )


def _model_to_metric_row(model: ManualInput) -> MetricRow:
    return MetricRow(
        period_index=model.period_index,
        period_date=model.period_date,
        period_label=model.period_label,
        **{name: _plain(getattr(model, name)) for name in METRIC_ROW_NUMERIC_FIELDS},
    )


def _model_to_channel_row(model: ManualChannelInput) -> ChannelRow:
    return ChannelRow(
        period_index=model.period_index,
        channel_name=model.channel_name,
        channel_type=model.channel_type,
        period_label=model.period_label,
        **{name: _plain(getattr(model, name)) for name in CHANNEL_ROW_NUMERIC_FIELDS},
    )

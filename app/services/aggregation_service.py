"""
app/services/aggregation_service.py

Data aggregation layer for KPI calculations.

Translates raw manually entered rows into clean numerical totals that
the KPI formulas can consume directly.

Null handling
-------------
A ``None`` field means "not supplied" and contributes zero to every sum.
The distinction between ``None`` and ``0`` is kept on the raw rows for the
quality scorer; it does not survive aggregation.

No business logic lives here beyond summation. Division, formula
application, and result structuring belong to the ``kpi`` formulas.
"""

from __future__ import annotations

import logging
from typing import Sequence

from app.domain.manual_input import (
    CHANNEL_ROW_NUMERIC_FIELDS,
    FINANCIAL_FIELDS,
    METRIC_ROW_NUMERIC_FIELDS,
    PERIOD_DAYS,
    AggregateTotals,
    ChannelAggregate,
    ChannelRow,
    MetricRow,
    PeriodPoint,
)
from kpi.channel import ChannelKPIFormula

logger = logging.getLogger(__name__)


def _sum_field(rows: Sequence[object], name: str) -> float | int:
    return sum((getattr(row, name) or 0) for row in rows)


def period_days_for(period_type: str) -> int:
    """
    Number of days covered by *period_type*.

    Raises
    ------
    ValueError
        If *period_type* is not one of ``7days``, ``30days``, ``90days``.
    """
    try:
        return PERIOD_DAYS[period_type]
    except KeyError:
        raise ValueError(
            f"Unknown period_type {period_type!r}. Valid types: {sorted(PERIOD_DAYS)}"
        ) from None


class AggregationService:
    """
    Sums period rows and channel rows into window totals.

    Stateless; every method is a pure function of its arguments.
    Duplicate ``period_index`` values are summed as-is.
    """

    def __init__(self, channel_formula: ChannelKPIFormula | None = None) -> None:
        self._channel_formula = channel_formula or ChannelKPIFormula()

    # ------------------------------------------------------------------
    # Period totals
    # ------------------------------------------------------------------

    def aggregate_periods(
        self,
        rows: Sequence[MetricRow],
        period_type: str,
    ) -> AggregateTotals:
        """
        Sum every numeric field of *rows*, treating ``None`` as zero.

        Returns
        -------
        AggregateTotals
            Totals plus ``period_days`` for *period_type*.  All zero for an
            empty row list.
        """
        period_days = period_days_for(period_type)
        sums: dict[str, float | int] = {}
        for name in METRIC_ROW_NUMERIC_FIELDS:
            total = _sum_field(rows, name)
            sums[name] = float(total) if name in FINANCIAL_FIELDS else int(total)

        totals = AggregateTotals(period_days=period_days, **sums)
        logger.debug(
            "aggregate_periods rows=%d period_type=%s sessions=%d revenue=%.2f",
            len(rows),
            period_type,
            totals.sessions,
            totals.revenue,
        )
        return totals

    def period_series(self, rows: Sequence[MetricRow]) -> tuple[PeriodPoint, ...]:
        """
        Per-period chart points ordered by ``period_index``.
        """
        ordered = sorted(rows, key=lambda row: row.period_index)
        return tuple(
            PeriodPoint(
                period_index=row.period_index,
                period_date=row.period_date,
                period_label=row.period_label,
                sessions=row.sessions or 0,
                leads=row.leads or 0,
                sales=row.sales or 0,
                revenue=float(row.revenue or 0),
                ad_spend=float(row.ad_spend or 0),
            )
            for row in ordered
        )

    # ------------------------------------------------------------------
    # Channel totals
    # ------------------------------------------------------------------

    def aggregate_channels(
        self,
        channel_rows: Sequence[ChannelRow],
    ) -> tuple[ChannelAggregate, ...]:
        """
        Group *channel_rows* by ``channel_name`` and derive per-channel unit
        costs and traffic share.

        Channels keep the order in which they first appear.  The channel
        type is taken from the first row seen for each channel.
        """
        groups: dict[str, list[ChannelRow]] = {}
        for row in channel_rows:
            groups.setdefault(row.channel_name, []).append(row)

        summed: dict[str, dict[str, float | int]] = {}
        for name, members in groups.items():
            summed[name] = {
                field_name: _sum_field(members, field_name)
                for field_name in CHANNEL_ROW_NUMERIC_FIELDS
            }

        total_sessions = sum(int(s["sessions"]) for s in summed.values())

        aggregates: list[ChannelAggregate] = []
        for name, sums in summed.items():
            derived = self._channel_formula.calculate(
                {**sums, "total_sessions": total_sessions}
            )
            aggregates.append(
                ChannelAggregate(
                    channel_name=name,
                    channel_type=groups[name][0].channel_type,
                    sessions=int(sums["sessions"]),
                    clicks=int(sums["clicks"]),
                    impressions=int(sums["impressions"]),
                    leads=int(sums["leads"]),
                    ad_spend=float(sums["ad_spend"]),
                    cpc=derived["cpc"],
                    cpl=derived["cpl"],
                    cpm=derived["cpm"],
                    cr=derived["cr"],
                    share_of_traffic=derived["share_of_traffic"],
                )
            )

        logger.debug(
            "aggregate_channels rows=%d channels=%d total_sessions=%d",
            len(channel_rows),
            len(aggregates),
            total_sessions,
        )
        return tuple(aggregates)

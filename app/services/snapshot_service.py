"""
app/services/snapshot_service.py

Pure manual-input engine: validate -> aggregate -> derive -> score -> assemble.

The engine performs no I/O and reads no clock or random source, so the
same input always yields an identical :class:`ComputeResult`.  Persistence
is the caller's concern (see ``ManualInputOrchestrator``).

Failure contract
----------------
- Any error-severity validation issue -> ``ComputeResult(issues, None)``;
  nothing is aggregated.
- Warnings are returned alongside a populated snapshot.
- Zero or missing denominators produce ``None`` metrics, never exceptions.
- An unknown ``period_type`` raises ``ValueError``.
"""

from __future__ import annotations

import logging
from typing import Sequence

from app.domain.manual_input import (
    AggregateTotals,
    ChannelAggregate,
    ChannelRow,
    ComputeResult,
    DerivedMetrics,
    EventMapping,
    MetricRow,
    PeriodPoint,
    Snapshot,
    ValidationMode,
)
from app.services.aggregation_service import AggregationService, period_days_for
from app.services.kpi_service import KPIService
from app.services.quality_service import QualityService
from app.validators.metric_row_validator import MetricRowValidator

logger = logging.getLogger(__name__)


class SnapshotService:
    """
    Composes the validator, aggregators, KPI engine and quality scorer.

    Holds no per-call state; one instance may serve any number of
    submissions.
    """

    def __init__(
        self,
        *,
        validator: MetricRowValidator | None = None,
        aggregation: AggregationService | None = None,
        kpi: KPIService | None = None,
        quality: QualityService | None = None,
    ) -> None:
        self._validator = validator or MetricRowValidator()
        self._aggregation = aggregation or AggregationService()
        self._kpi = kpi or KPIService()
        self._quality = quality or QualityService()

    def compute(
        self,
        rows: Sequence[MetricRow],
        channel_rows: Sequence[ChannelRow] = (),
        *,
        period_type: str,
        granularity: str,
        currency: str,
        timezone: str,
        mapping: EventMapping | None = None,
        mode: str = ValidationMode.INTERACTIVE,
    ) -> ComputeResult:
        """
        Run the full engine for one submission.

        Parameters
        ----------
        rows:
            Period rows; an empty list yields all-zero totals and
            all-``None`` ratios.
        channel_rows:
            Optional per-channel rows.
        period_type, granularity, currency, timezone, mapping:
            Passed through to the snapshot; ``period_type`` also selects
            the day count for daily run-rates.
        mode:
            Validation rule set, see :class:`ValidationMode`.

        Returns
        -------
        ComputeResult
            ``snapshot`` is ``None`` when any blocking issue was found.
        """
        period_days_for(period_type)

        issues = self._validator.validate(rows, mode=mode)
        issues.extend(self._validator.validate_channel_rows(channel_rows))
        result_issues = tuple(issues)

        if any(issue.is_error for issue in result_issues):
            logger.info(
                "Snapshot rejected: %d error(s), %d warning(s) across %d row(s)",
                sum(1 for i in result_issues if i.is_error),
                sum(1 for i in result_issues if not i.is_error),
                len(rows),
            )
            return ComputeResult(issues=result_issues, snapshot=None)

        totals = self._aggregation.aggregate_periods(rows, period_type)
        channels = self._aggregation.aggregate_channels(channel_rows)
        series = self._aggregation.period_series(rows)
        metrics = self._kpi.derive(totals)
        score = self._quality.score(totals, rows)

        snapshot = self.assemble(
            period_type=period_type,
            granularity=granularity,
            currency=currency,
            timezone=timezone,
            mapping=mapping or EventMapping(),
            totals=totals,
            metrics=metrics,
            channels=channels,
            period_series=series,
            data_quality_score=score,
            gate_status=self._quality.gate_status(),
        )
        logger.debug(
            "Snapshot computed rows=%d channels=%d score=%d warnings=%d",
            len(rows),
            len(channels),
            score,
            len(result_issues),
        )
        return ComputeResult(issues=result_issues, snapshot=snapshot)

    @staticmethod
    def assemble(
        *,
        period_type: str,
        granularity: str,
        currency: str,
        timezone: str,
        mapping: EventMapping,
        totals: AggregateTotals,
        metrics: DerivedMetrics,
        channels: Sequence[ChannelAggregate],
        period_series: Sequence[PeriodPoint],
        data_quality_score: int,
        gate_status: str,
    ) -> Snapshot:
        """Bundle already computed parts into one immutable snapshot."""
        return Snapshot(
            period_type=period_type,
            granularity=granularity,
            currency=currency,
            timezone=timezone,
            mapping=mapping,
            totals=totals,
            metrics=metrics,
            channels=tuple(channels),
            period_series=tuple(period_series),
            data_quality_score=data_quality_score,
            gate_status=gate_status,
        )


_default_service = SnapshotService()


def compute_snapshot(
    rows: Sequence[MetricRow],
    channel_rows: Sequence[ChannelRow] = (),
    *,
    period_type: str,
    granularity: str,
    currency: str,
    timezone: str,
    mapping: EventMapping | None = None,
    mode: str = ValidationMode.INTERACTIVE,
) -> ComputeResult:
    """Module-level shortcut for :meth:`SnapshotService.compute`."""
    return _default_service.compute(
        rows,
        channel_rows,
        period_type=period_type,
        granularity=granularity,
        currency=currency,
        timezone=timezone,
        mapping=mapping,
        mode=mode,
    )

"""
app/domain package marker.
"""

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
    ValidationIssue,
)

__all__ = [
    "AggregateTotals",
    "ChannelAggregate",
    "ChannelRow",
    "ComputeResult",
    "DerivedMetrics",
    "EventMapping",
    "MetricRow",
    "PeriodPoint",
    "Snapshot",
    "ValidationIssue",
]

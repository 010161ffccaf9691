"""
app/services package marker.
"""

from app.services.aggregation_service import AggregationService
from app.services.kpi_service import KPIService
from app.services.period_service import PeriodService
from app.services.quality_service import QualityService
from app.services.snapshot_service import SnapshotService, compute_snapshot

__all__ = [
    "AggregationService",
    "KPIService",
    "PeriodService",
    "QualityService",
    "SnapshotService",
    "compute_snapshot",
]

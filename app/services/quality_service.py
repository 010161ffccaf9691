"""
app/services/quality_service.py

Data completeness scoring for manually entered snapshots.

The score is a coarse additive heuristic, not a statistical confidence
measure:

    +30  at least one row supplied sessions, leads, sales or revenue
    +15  total sessions > 0
    +15  total leads > 0
    +15  total sales > 0
    +15  total revenue > 0
    +10  total ad spend > 0
"""

from __future__ import annotations

from typing import Sequence

from app.domain.manual_input import AggregateTotals, GateStatus, MetricRow

USABLE_DATA_FIELDS: tuple[str, ...] = ("sessions", "leads", "sales", "revenue")

USABLE_DATA_POINTS = 30
TOTAL_BUCKETS: tuple[tuple[str, int], ...] = (
    ("sessions", 15),
    ("leads", 15),
    ("sales", 15),
    ("revenue", 15),
    ("ad_spend", 10),
)
MAX_SCORE = 100


class QualityService:
    """
    Scores how complete a submission is and tags its readiness gate.
    """

    def score(self, totals: AggregateTotals, rows: Sequence[MetricRow]) -> int:
        """
        Return an integer completeness score in ``[0, 100]``.

        A field supplied as ``0`` counts as usable data for the first
        bucket; a field left as ``None`` does not.
        """
        points = 0
        if any(row.has_any(*USABLE_DATA_FIELDS) for row in rows):
            points += USABLE_DATA_POINTS
        for name, bucket in TOTAL_BUCKETS:
            if getattr(totals, name) > 0:
                points += bucket
        return max(0, min(MAX_SCORE, points))

    def gate_status(self) -> str:
        """Manually entered data is always sandbox-grade."""
        return GateStatus.SANDBOX

"""
app/services/period_service.py

Builds the empty period grid a user fills in during manual entry.

Row counts per window
---------------------
============  =====  ======  ======
granularity   7days  30days  90days
============  =====  ======  ======
month           1      3       6
week            1      4      13
day             7     30      90
============  =====  ======  ======

Periods are ordered oldest first and end at the anchor date.
"""

from __future__ import annotations

from datetime import date, timedelta

from app.domain.manual_input import (
    ALLOWED_GRANULARITIES,
    Granularity,
    MetricRow,
    PeriodType,
)
from app.services.aggregation_service import period_days_for

MONTH_NAMES: tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

_PERIOD_COUNTS: dict[str, dict[str, int]] = {
    Granularity.MONTH: {PeriodType.DAYS_7: 1, PeriodType.DAYS_30: 3, PeriodType.DAYS_90: 6},
    Granularity.WEEK: {PeriodType.DAYS_7: 1, PeriodType.DAYS_30: 4, PeriodType.DAYS_90: 13},
    Granularity.DAY: {PeriodType.DAYS_7: 7, PeriodType.DAYS_30: 30, PeriodType.DAYS_90: 90},
}


def period_label(period_date: date, granularity: str) -> str:
    """
    Display label for a period starting at *period_date*.

    ``month`` -> ``"March 2026"``, ``week`` -> ``"2.3 - 8.3"``,
    ``day`` -> ``"2 Mar"``.
    """
    if granularity == Granularity.MONTH:
        return f"{MONTH_NAMES[period_date.month - 1]} {period_date.year}"
    if granularity == Granularity.WEEK:
        end = period_date + timedelta(days=6)
        return f"{period_date.day}.{period_date.month} - {end.day}.{end.month}"
    return f"{period_date.day} {MONTH_NAMES[period_date.month - 1][:3]}"


def _shift_months(anchor: date, months_back: int) -> date:
    index = anchor.year * 12 + (anchor.month - 1) - months_back
    return date(index // 12, index % 12 + 1, 1)


class PeriodService:
    """
    Generates empty ``MetricRow`` grids for a window and granularity.
    """

    def period_count(self, period_type: str, granularity: str) -> int:
        period_days_for(period_type)
        if granularity not in ALLOWED_GRANULARITIES:
            raise ValueError(
                f"Unknown granularity {granularity!r}. "
                f"Valid values: {sorted(ALLOWED_GRANULARITIES)}"
            )
        return _PERIOD_COUNTS[granularity][period_type]

    def build_periods(
        self,
        period_type: str,
        granularity: str,
        anchor: date,
    ) -> list[MetricRow]:
        """
        Return empty rows, oldest first, whose last period starts at
        *anchor* (or, for months, on the first of its month).

        Every numeric field is ``None`` ("not supplied").
        """
        count = self.period_count(period_type, granularity)
        rows: list[MetricRow] = []
        for offset in range(count - 1, -1, -1):
            if granularity == Granularity.MONTH:
                start = _shift_months(anchor, offset)
            elif granularity == Granularity.WEEK:
                start = anchor - timedelta(days=offset * 7)
            else:
                start = anchor - timedelta(days=offset)
            rows.append(
                MetricRow(
                    period_index=count - 1 - offset,
                    period_date=start,
                    period_label=period_label(start, granularity),
                )
            )
        return rows

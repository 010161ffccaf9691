"""
tests/test_period_service.py

Unit tests for the empty period grid and label formatting.
"""

from __future__ import annotations

from datetime import date

import pytest

from app.services.period_service import PeriodService, period_label
from app.domain.manual_input import AggregateTotals
from app.services.kpi_service import KPIService
from app.services.presentation import currency_symbol, format_amount, format_money_metrics


@pytest.fixture()
def svc() -> PeriodService:
    return PeriodService()


class TestPeriodLabel:
    def test_month(self) -> None:
        assert period_label(date(2026, 3, 1), "month") == "March 2026"

    def test_week(self) -> None:
        assert period_label(date(2026, 3, 2), "week") == "2.3 - 8.3"

    def test_week_across_month_end(self) -> None:
        assert period_label(date(2026, 3, 30), "week") == "30.3 - 5.4"

    def test_day(self) -> None:
        assert period_label(date(2026, 3, 2), "day") == "2 Mar"


class TestBuildPeriods:
    @pytest.mark.parametrize(
        "period_type, granularity, count",
        [
            ("7days", "month", 1),
            ("30days", "month", 3),
            ("90days", "month", 6),
            ("7days", "week", 1),
            ("30days", "week", 4),
            ("90days", "week", 13),
            ("7days", "day", 7),
            ("30days", "day", 30),
            ("90days", "day", 90),
        ],
    )
    def test_counts(self, svc: PeriodService, period_type: str, granularity: str, count: int) -> None:
        rows = svc.build_periods(period_type, granularity, date(2026, 3, 15))
        assert len(rows) == count
        assert [row.period_index for row in rows] == list(range(count))

    def test_months_anchor_on_first_and_cross_years(self, svc: PeriodService) -> None:
        rows = svc.build_periods("90days", "month", date(2026, 2, 10))
        assert [row.period_date for row in rows] == [
            date(2025, 9, 1),
            date(2025, 10, 1),
            date(2025, 11, 1),
            date(2025, 12, 1),
            date(2026, 1, 1),
            date(2026, 2, 1),
        ]
        assert rows[0].period_label == "September 2025"

    def test_weeks_end_at_anchor(self, svc: PeriodService) -> None:
        rows = svc.build_periods("30days", "week", date(2026, 3, 2))
        assert rows[0].period_date == date(2026, 2, 9)
        assert rows[-1].period_date == date(2026, 3, 2)
        assert rows[-1].period_label == "2.3 - 8.3"

    def test_days_end_at_anchor(self, svc: PeriodService) -> None:
        rows = svc.build_periods("7days", "day", date(2026, 3, 2))
        assert rows[0].period_date == date(2026, 2, 24)
        assert rows[-1].period_label == "2 Mar"

    def test_rows_are_empty(self, svc: PeriodService) -> None:
        (row,) = svc.build_periods("7days", "month", date(2026, 3, 2))
        assert row.sessions is None
        assert row.revenue is None

    def test_unknown_granularity(self, svc: PeriodService) -> None:
        with pytest.raises(ValueError, match="granularity"):
            svc.build_periods("7days", "quarter", date(2026, 3, 2))

    def test_unknown_period_type(self, svc: PeriodService) -> None:
        with pytest.raises(ValueError, match="period_type"):
            svc.build_periods("1day", "day", date(2026, 3, 2))


class TestPresentation:
    @pytest.mark.parametrize(
        "code, symbol",
        [("USD", "$"), ("KZT", "₸"), ("RUB", "₽"), ("EUR", "€"), ("usd", "$"), ("GBP", "GBP")],
    )
    def test_currency_symbol(self, code: str, symbol: str) -> None:
        assert currency_symbol(code) == symbol

    def test_format_amount(self) -> None:
        assert format_amount(1234.5, "USD") == "$1,234.50"
        assert format_amount(-10.0, "EUR") == "-€10.00"

    def test_format_missing_amount(self) -> None:
        assert format_amount(None, "USD") == "—"

    def test_money_metrics_only(self) -> None:
        metrics = KPIService().derive(
            AggregateTotals(period_days=30, sales=4, revenue=1000.0, ad_spend=200.0)
        )
        formatted = format_money_metrics(metrics, "EUR")
        assert formatted["cac"] == "€50.00"
        assert formatted["net_profit"] == "€800.00"
        assert formatted["cpc"] == "—"
        assert "roas" not in formatted
        assert "cr_session_lead" not in formatted

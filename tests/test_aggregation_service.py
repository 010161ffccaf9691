"""
tests/test_aggregation_service.py

Unit tests for AggregationService: period totals, chart series and
per-channel aggregation.
"""

from __future__ import annotations

from datetime import date

import pytest

from app.domain.manual_input import ChannelRow, ChannelType, MetricRow
from app.services.aggregation_service import AggregationService, period_days_for


@pytest.fixture()
def svc() -> AggregationService:
    return AggregationService()


# ---------------------------------------------------------------------------
# Period totals
# ---------------------------------------------------------------------------


class TestAggregatePeriods:
    def test_sums_with_none_as_zero(self, svc: AggregationService) -> None:
        rows = [
            MetricRow(period_index=0, sessions=100, revenue=10.5),
            MetricRow(period_index=1, sessions=None, revenue=None),
            MetricRow(period_index=2, sessions=250, revenue=4.5),
        ]
        totals = svc.aggregate_periods(rows, "30days")
        assert totals.sessions == 350
        assert totals.revenue == pytest.approx(15.0)
        assert totals.leads == 0

    def test_duplicate_period_index_is_summed_as_is(self, svc: AggregationService) -> None:
        rows = [
            MetricRow(period_index=0, leads=3),
            MetricRow(period_index=0, leads=4),
        ]
        assert svc.aggregate_periods(rows, "7days").leads == 7

    @pytest.mark.parametrize(
        "period_type, days",
        [("7days", 7), ("30days", 30), ("90days", 90)],
    )
    def test_period_days(self, svc: AggregationService, period_type: str, days: int) -> None:
        assert svc.aggregate_periods([], period_type).period_days == days

    def test_empty_rows_are_all_zero(self, svc: AggregationService) -> None:
        totals = svc.aggregate_periods([], "30days")
        values = totals.as_inputs()
        values.pop("period_days")
        assert all(value == 0 for value in values.values())

    def test_financial_totals_are_floats(self, svc: AggregationService) -> None:
        totals = svc.aggregate_periods([MetricRow(period_index=0, cogs=5)], "7days")  # type: ignore[arg-type]
        assert isinstance(totals.cogs, float)
        assert isinstance(totals.sessions, int)

    def test_unknown_period_type_raises(self, svc: AggregationService) -> None:
        with pytest.raises(ValueError, match="Unknown period_type"):
            svc.aggregate_periods([], "14days")

    def test_period_days_for(self) -> None:
        assert period_days_for("90days") == 90


class TestPeriodSeries:
    def test_ordered_by_period_index(self, svc: AggregationService) -> None:
        rows = [
            MetricRow(period_index=2, period_label="c", sessions=3),
            MetricRow(period_index=0, period_label="a", sessions=1, period_date=date(2026, 3, 1)),
            MetricRow(period_index=1, period_label="b"),
        ]
        series = svc.period_series(rows)
        assert [point.period_label for point in series] == ["a", "b", "c"]
        assert series[1].sessions == 0
        assert series[1].revenue == 0.0
        assert series[0].period_date == date(2026, 3, 1)


# ---------------------------------------------------------------------------
# Channels
# ---------------------------------------------------------------------------


class TestAggregateChannels:
    def test_share_of_traffic(self, svc: AggregationService) -> None:
        rows = [
            ChannelRow(period_index=0, channel_name="Instagram", sessions=100),
            ChannelRow(period_index=1, channel_name="Instagram", sessions=200),
            ChannelRow(period_index=0, channel_name="Google Ads", sessions=100),
        ]
        channels = {c.channel_name: c for c in svc.aggregate_channels(rows)}
        assert channels["Instagram"].sessions == 300
        assert channels["Instagram"].share_of_traffic == pytest.approx(75.0)
        assert channels["Google Ads"].share_of_traffic == pytest.approx(25.0)

    def test_shares_close_to_hundred(self, svc: AggregationService) -> None:
        rows = [
            ChannelRow(period_index=0, channel_name=name, sessions=sessions)
            for name, sessions in (("A", 1), ("B", 1), ("C", 1), ("D", None))
        ]
        shares = [c.share_of_traffic for c in svc.aggregate_channels(rows)]
        assert sum(shares) == pytest.approx(100.0)
        assert all(0.0 <= share <= 100.0 for share in shares)

    def test_zero_total_sessions_gives_zero_share(self, svc: AggregationService) -> None:
        rows = [
            ChannelRow(period_index=0, channel_name="Telegram", ad_spend=50.0),
            ChannelRow(period_index=0, channel_name="VK", sessions=0),
        ]
        for channel in svc.aggregate_channels(rows):
            assert channel.share_of_traffic == 0.0
            assert channel.cr is None

    def test_unit_costs(self, svc: AggregationService) -> None:
        rows = [
            ChannelRow(
                period_index=0,
                channel_name="Google Ads",
                channel_type=ChannelType.SEARCH,
                sessions=400,
                clicks=200,
                impressions=10000,
                leads=20,
                ad_spend=300.0,
            ),
            ChannelRow(
                period_index=1,
                channel_name="Google Ads",
                channel_type=ChannelType.SEARCH,
                sessions=100,
                clicks=100,
                leads=5,
                ad_spend=150.0,
            ),
        ]
        (channel,) = svc.aggregate_channels(rows)
        assert channel.channel_type == ChannelType.SEARCH
        assert channel.cpc == pytest.approx(1.5)
        assert channel.cpl == pytest.approx(18.0)
        assert channel.cpm == pytest.approx(45.0)
        assert channel.cr == pytest.approx(5.0)
        assert channel.sales == 0
        assert channel.revenue == 0.0

    def test_zero_denominators_are_none(self, svc: AggregationService) -> None:
        (channel,) = svc.aggregate_channels(
            [ChannelRow(period_index=0, channel_name="Organic", sessions=10)]
        )
        assert channel.cpc is None
        assert channel.cpl is None
        assert channel.cpm is None
        assert channel.cr == pytest.approx(0.0)

    def test_first_appearance_order(self, svc: AggregationService) -> None:
        rows = [
            ChannelRow(period_index=0, channel_name="TikTok"),
            ChannelRow(period_index=0, channel_name="Direct"),
            ChannelRow(period_index=1, channel_name="TikTok"),
        ]
        assert [c.channel_name for c in svc.aggregate_channels(rows)] == ["TikTok", "Direct"]

    def test_no_channel_rows(self, svc: AggregationService) -> None:
        assert svc.aggregate_channels([]) == ()

"""
kpi/funnel.py

Marketing funnel and finance KPI formulas for manually entered data.

Expected inputs
---------------
Window totals (nulls already summed as zero):
sessions, users, clicks, impressions, organic_sessions, paid_sessions,
leads, deals, sales, repeat_sales : int
revenue, ad_spend, total_budget, cogs : float
period_days : int
    Number of days covered by the reporting window.

Formulas
--------
Conversion rates   cr_session_lead = leads / sessions * 100, and so on
                   down the funnel (see ``calculate``)
Unit costs         cpc, cpu, cpl, cpd, cps (= cac) = ad_spend / stage count
                   cpm = ad_spend / impressions * 1000
ROI                = (revenue - ad_spend) / ad_spend * 100
ROMI               = ROI (no separate marketing-attributed revenue exists)
ROAS               = revenue / ad_spend
Gross profit       = revenue - cogs
Net profit, EBITDA = revenue - cogs - ad_spend
Repeat rate        = repeat_sales / sales * 100
ATP                = revenue / sales
SPH                = revenue / users
LTV                = ATP * (1 + repeat_rate / 100)
LTV/CAC            = LTV / CAC

Division-by-zero cases, and results that are not finite floats, return
None for the affected metric.
"""

from __future__ import annotations

from typing import Any

from kpi.base import _SENTINEL, BaseKPIFormula, finite_or_none, safe_percent, safe_ratio

METRIC_UNITS: dict[str, str] = {
    "cr_session_lead": "percent",
    "cr_lead_deal": "percent",
    "cr_deal_sale": "percent",
    "cr_session_sale": "percent",
    "cr_click_lead": "percent",
    "cpc": "currency",
    "cpu": "currency",
    "cpl": "currency",
    "cpd": "currency",
    "cps": "currency",
    "cac": "currency",
    "cpm": "currency",
    "roi": "percent",
    "romi": "percent",
    "roas": "ratio",
    "gross_profit": "currency",
    "net_profit": "currency",
    "ebitda": "currency",
    "repeat_rate": "percent",
    "atp": "currency",
    "sph": "currency",
    "ltv": "currency",
    "ebitda_margin": "percent",
    "gross_margin": "percent",
    "ctr": "percent",
    "organic_traffic_share": "percent",
    "paid_traffic_share": "percent",
    "daily_sales": "count",
    "daily_revenue": "currency",
    "ltv_cac_ratio": "ratio",
    "effective_budget": "currency",
}


class FunnelKPIFormula(BaseKPIFormula):
    """
    Deterministic funnel KPI calculations with safe division-by-zero handling.

    All arithmetic is self-contained.  No I/O, no logging, no side effects.
    """

    def calculate(self, inputs: dict[str, Any]) -> dict[str, float | None]:
        """
        Compute every funnel, cost, profitability and customer-value metric.

        Parameters
        ----------
        inputs:
            Dictionary containing the keys listed in the module docstring.

        Returns
        -------
        dict
            Keys are the names in :data:`METRIC_UNITS`.  A metric is
            ``None`` when its formula produces a division by zero.
        """
        sessions: int = inputs["sessions"]
        users: int = inputs["users"]
        clicks: int = inputs["clicks"]
        impressions: int = inputs["impressions"]
        organic_sessions: int = inputs["organic_sessions"]
        paid_sessions: int = inputs["paid_sessions"]
        leads: int = inputs["leads"]
        deals: int = inputs["deals"]
        sales: int = inputs["sales"]
        repeat_sales: int = inputs["repeat_sales"]
        revenue: float = inputs["revenue"]
        ad_spend: float = inputs["ad_spend"]
        total_budget: float = inputs["total_budget"]
        cogs: float = inputs["cogs"]
        period_days: int = inputs["period_days"]

        cac = safe_ratio(ad_spend, sales)
        roi = _roi(revenue, ad_spend)
        gross_profit = finite_or_none(revenue - cogs)
        net_profit = finite_or_none(revenue - cogs - ad_spend)
        repeat_rate = safe_percent(repeat_sales, sales)
        atp = safe_ratio(revenue, sales)
        ltv = _ltv(atp, repeat_rate)

        return {
            # funnel conversion
            "cr_session_lead": safe_percent(leads, sessions),
            "cr_lead_deal": safe_percent(deals, leads),
            "cr_deal_sale": safe_percent(sales, deals),
            "cr_session_sale": safe_percent(sales, sessions),
            "cr_click_lead": safe_percent(leads, clicks),
            # cost per action
            "cpc": safe_ratio(ad_spend, clicks),
            "cpu": safe_ratio(ad_spend, users),
            "cpl": safe_ratio(ad_spend, leads),
            "cpd": safe_ratio(ad_spend, deals),
            "cps": cac,
            "cac": cac,
            "cpm": safe_ratio(ad_spend, impressions, scale=1000.0),
            # profitability
            "roi": roi,
            "romi": roi,
            "roas": safe_ratio(revenue, ad_spend),
            "gross_profit": gross_profit,
            "net_profit": net_profit,
            "ebitda": net_profit,
            "ebitda_margin": safe_percent(net_profit, revenue),
            "gross_margin": safe_percent(gross_profit, revenue),
            # customer value
            "repeat_rate": repeat_rate,
            "atp": atp,
            "sph": safe_ratio(revenue, users),
            "ltv": ltv,
            "ltv_cac_ratio": safe_ratio(ltv, cac),
            # traffic
            "ctr": safe_percent(clicks, impressions),
            "organic_traffic_share": safe_percent(
                organic_sessions, organic_sessions + paid_sessions
            ),
            "paid_traffic_share": safe_percent(
                paid_sessions, organic_sessions + paid_sessions
            ),
            # daily run-rate
            "daily_sales": safe_ratio(sales, period_days),
            "daily_revenue": safe_ratio(revenue, period_days),
            "effective_budget": _effective_budget(total_budget, ad_spend),
        }


# ---------------------------------------------------------------------------
# Pure formula functions
# ---------------------------------------------------------------------------


def _roi(revenue: float, ad_spend: float) -> float | None:
    """
    ROI = (revenue - ad_spend) / ad_spend * 100.

    Returns None when ad_spend is zero.
    """
    return safe_percent(revenue - ad_spend, ad_spend)


def _ltv(atp: float | None, repeat_rate: float | None) -> float | None:
    """
    LTV = ATP * (1 + repeat_rate / 100).

    Returns None when ATP is None.  A missing repeat rate counts as a
    single purchase per customer.
    """
    if atp is None:
        return _SENTINEL
    purchases = 1.0 if repeat_rate is None else 1.0 + repeat_rate / 100.0
    return finite_or_none(atp * purchases)


def _effective_budget(total_budget: float, ad_spend: float) -> float | None:
    """Declared total budget, falling back to ad spend when none was entered."""
    return finite_or_none(total_budget if total_budget > 0 else ad_spend)

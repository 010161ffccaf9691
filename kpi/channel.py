"""
kpi/channel.py

Per-channel unit cost formulas.

Expected inputs
---------------
sessions, clicks, impressions, leads : int
    Channel totals across all periods.
ad_spend : float
    Channel spend across all periods.
total_sessions : int
    Sessions summed over every channel in the submission.

Formulas
--------
CPC              = ad_spend / clicks
CPL              = ad_spend / leads
CPM              = ad_spend / impressions * 1000
CR               = leads / sessions * 100
Share of traffic = sessions / total_sessions * 100

Division-by-zero cases return None, except share of traffic which is
0.0 when no channel reported any sessions.
"""

from __future__ import annotations

from typing import Any

from kpi.base import BaseKPIFormula, safe_percent, safe_ratio


class ChannelKPIFormula(BaseKPIFormula):
    """
    Deterministic channel KPI calculations.

    All arithmetic is self-contained.  No I/O, no logging, no side effects.
    """

    def calculate(self, inputs: dict[str, Any]) -> dict[str, float | None]:
        sessions: int = inputs["sessions"]
        clicks: int = inputs["clicks"]
        impressions: int = inputs["impressions"]
        leads: int = inputs["leads"]
        ad_spend: float = inputs["ad_spend"]
        total_sessions: int = inputs["total_sessions"]

        return {
            "cpc": safe_ratio(ad_spend, clicks),
            "cpl": safe_ratio(ad_spend, leads),
            "cpm": safe_ratio(ad_spend, impressions, scale=1000.0),
            "cr": safe_percent(leads, sessions),
            "share_of_traffic": _share_of_traffic(sessions, total_sessions),
        }


def _share_of_traffic(sessions: int, total_sessions: int) -> float:
    """
    Share = sessions / total_sessions * 100.

    Returns 0.0 (not None) when total_sessions is zero so that "no channel
    traffic" still reads as a zero share.
    """
    share = safe_percent(sessions, total_sessions)
    return 0.0 if share is None else share

"""
app/services/kpi_service.py

Deterministic KPI derivation engine.

All calculation functions operate on pre-aggregated, typed input
structures.  No database logic lives inside the calculation layer: the
caller is responsible for summing raw rows into
:class:`~app.domain.manual_input.AggregateTotals` before invoking this
service.

The formulas themselves live in :mod:`kpi.funnel`; this service maps the
totals into formula inputs and the formula output back into the typed
:class:`~app.domain.manual_input.DerivedMetrics` record.
"""

from __future__ import annotations

import logging
from typing import Any

from app.domain.manual_input import AggregateTotals, DerivedMetrics
from kpi.funnel import METRIC_UNITS, FunnelKPIFormula

logger = logging.getLogger(__name__)


class KPIService:
    """
    Stateless, deterministic KPI derivation engine.

    Usage::

        service = KPIService()
        metrics = service.derive(totals)
        print(metrics.roas)  # 5.0
    """

    def __init__(self, formula: FunnelKPIFormula | None = None) -> None:
        self._formula = formula or FunnelKPIFormula()

    def derive(self, totals: AggregateTotals) -> DerivedMetrics:
        """
        Derive every funnel KPI from *totals*.

        Edge cases
        ----------
        * Any ratio whose denominator total is zero is ``None``; this is a
          defined outcome, not an error, and never raises.
        * ``ltv`` is ``None`` when ``atp`` is; a missing ``repeat_rate``
          counts as one purchase per customer.

        Returns
        -------
        DerivedMetrics
            One value per metric in :data:`kpi.funnel.METRIC_UNITS`.
        """
        values = self._formula.calculate(totals.as_inputs())
        metrics = DerivedMetrics(**values)

        undefined = sorted(name for name, value in values.items() if value is None)
        if undefined:
            logger.debug(
                "KPI derivation left %d metric(s) undefined: %s",
                len(undefined),
                ", ".join(undefined),
            )
        return metrics

    @staticmethod
    def to_payload(metrics: DerivedMetrics) -> dict[str, dict[str, Any]]:
        """
        Structured ``{metric: {"value": ..., "unit": ...}}`` payload.
        """
        return metrics.to_payload(METRIC_UNITS)

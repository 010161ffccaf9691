"""
app/services/presentation.py

Display helpers for rendering snapshot values.  Nothing here feeds back
into the engine.
"""

from __future__ import annotations

from app.domain.manual_input import DerivedMetrics
from kpi.funnel import METRIC_UNITS

CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$",
    "KZT": "₸",
    "RUB": "₽",
    "EUR": "€",
}


def currency_symbol(currency: str) -> str:
    """Symbol for *currency*, or the code itself when unknown."""
    code = currency.strip().upper()
    return CURRENCY_SYMBOLS.get(code, code)


def format_amount(value: float | None, currency: str) -> str:
    """
    Format a money value with its currency symbol; ``None`` renders as a dash.
    """
    if value is None:
        return "—"
    sign = "-" if value < 0 else ""
    return f"{sign}{currency_symbol(currency)}{abs(value):,.2f}"


def format_money_metrics(metrics: DerivedMetrics, currency: str) -> dict[str, str]:
    """
    Display strings for every currency-denominated metric of a snapshot.
    """
    return {
        name: format_amount(getattr(metrics, name), currency)
        for name in metrics.names()
        if METRIC_UNITS.get(name) == "currency"
    }

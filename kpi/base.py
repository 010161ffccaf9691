"""
kpi/base.py

Abstract base class and shared arithmetic for KPI formula implementations.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Any

_SENTINEL = None  # value stored when a metric cannot be computed


class BaseKPIFormula(ABC):
    """
    Contract for KPI formula implementations.

    Subclasses receive a plain dictionary of pre-aggregated numerical
    inputs and must return a plain dictionary of computed metric values.

    No I/O, no logging, and no side effects are permitted inside
    :meth:`calculate`.
    """

    @abstractmethod
    def calculate(self, inputs: dict[str, Any]) -> dict[str, Any]:
        """
        Compute KPI metrics from *inputs* and return a result dictionary.

        Parameters
        ----------
        inputs:
            Domain-specific numerical values required by the formula.

        Returns
        -------
        dict[str, Any]
            Computed metrics keyed by metric name.
        """


def safe_ratio(
    numerator: float | None,
    denominator: float | None,
    *,
    scale: float = 1.0,
) -> float | None:
    """
    numerator / denominator * scale.

    Returns None when either operand is None, when the denominator is
    zero, or when the result is not a finite float.
    """
    if numerator is None or denominator is None or denominator == 0:
        return _SENTINEL
    try:
        value = numerator / denominator * scale
    except OverflowError:
        return _SENTINEL
    return finite_or_none(value)


def finite_or_none(value: float | None) -> float | None:
    """*value* as a float, or None when it is missing or not finite."""
    if value is None:
        return _SENTINEL
    try:
        value = float(value)
    except OverflowError:
        return _SENTINEL
    return value if math.isfinite(value) else _SENTINEL


def safe_percent(numerator: float | None, denominator: float | None) -> float | None:
    """Ratio expressed as a percentage (x 100)."""
    return safe_ratio(numerator, denominator, scale=100.0)

"""
app/validators package marker.
"""

from app.validators.metric_row_validator import MetricRowValidator

__all__ = [
    "MetricRowValidator",
]

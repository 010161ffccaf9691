"""
app/schemas package marker.
"""

from app.schemas.manual_input import (
    ChannelRowPayload,
    ManualInputPreviewResponse,
    ManualInputRequest,
    ManualInputStoredResponse,
    ManualInputSubmitResponse,
    MetricRowPayload,
    PeriodGridResponse,
    ValidationIssueResponse,
)

__all__ = [
    "ChannelRowPayload",
    "ManualInputPreviewResponse",
    "ManualInputRequest",
    "ManualInputStoredResponse",
    "ManualInputSubmitResponse",
    "MetricRowPayload",
    "PeriodGridResponse",
    "ValidationIssueResponse",
]

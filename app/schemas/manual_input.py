"""
app/schemas/manual_input.py

Request and response schemas for the manual input endpoints.

Request models reject unknown keys and non-finite numbers; value-level
rules (negatives, funnel monotonicity) are left to the row validator so
that every issue is reported in one response.
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from app.config import ManualInputSettings
from app.domain.manual_input import (
    ChannelRow,
    EventMapping,
    MetricRow,
    ValidationIssue,
    resolve_channel_type,
)
from app.services.manual_input_orchestrator import ManualInputSubmission
from app.services.period_service import period_label

PeriodTypeLiteral = Literal["7days", "30days", "90days"]
GranularityLiteral = Literal["day", "week", "month"]
ChannelTypeLiteral = Literal["social", "search", "organic", "direct", "custom"]


class MetricRowPayload(BaseModel):
    """One reporting period as entered in the form."""

    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    period_index: int = Field(..., ge=0)
    period_date: date | None = None
    period_label: str = Field(default="", max_length=64)
    sessions: int | None = None
    users: int | None = None
    clicks: int | None = None
    impressions: int | None = None
    organic_sessions: int | None = None
    paid_sessions: int | None = None
    leads: int | None = None
    deals: int | None = None
    sales: int | None = None
    repeat_sales: int | None = None
    revenue: float | None = None
    ad_spend: float | None = None
    total_budget: float | None = None
    cogs: float | None = None

    def to_domain(self, granularity: str) -> MetricRow:
        values = self.model_dump()
        if not values["period_label"] and self.period_date is not None:
            values["period_label"] = period_label(self.period_date, granularity)
        return MetricRow(**values)

    @classmethod
    def from_domain(cls, row: MetricRow) -> MetricRowPayload:
        return cls(**asdict(row))


class ChannelRowPayload(BaseModel):
    """One channel's figures for one period."""

    model_config = ConfigDict(extra="forbid", allow_inf_nan=False, str_strip_whitespace=True)

    period_index: int = Field(..., ge=0)
    channel_name: str = Field(..., min_length=1, max_length=120)
    channel_type: ChannelTypeLiteral | None = None
    period_label: str = Field(default="", max_length=64)
    sessions: int | None = None
    clicks: int | None = None
    impressions: int | None = None
    leads: int | None = None
    ad_spend: float | None = None

    def to_domain(self) -> ChannelRow:
        values = self.model_dump()
        values["channel_type"] = self.channel_type or resolve_channel_type(self.channel_name)
        return ChannelRow(**values)

    @classmethod
    def from_domain(cls, row: ChannelRow) -> ChannelRowPayload:
        return cls(**asdict(row))


class EventMappingPayload(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    sale_event_type: str = Field(default="paid_order", min_length=1)
    lead_event_type: str = Field(default="form_submit", min_length=1)
    deal_event_type: str = Field(default="deal_created", min_length=1)
    repeat_window: int = Field(default=30, ge=1, le=365)

    def to_domain(self) -> EventMapping:
        return EventMapping(**self.model_dump())


class ManualInputRequest(BaseModel):
    """
    Full manual input form.

    ``currency`` and ``timezone`` fall back to the configured defaults.
    """

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    period_type: PeriodTypeLiteral
    granularity: GranularityLiteral
    currency: str | None = Field(default=None, min_length=3, max_length=8)
    timezone: str | None = Field(default=None, min_length=1, max_length=64)
    mapping: EventMappingPayload = Field(default_factory=EventMappingPayload)
    rows: list[MetricRowPayload] = Field(default_factory=list)
    channel_rows: list[ChannelRowPayload] = Field(default_factory=list)

    def to_submission(self, settings: ManualInputSettings) -> ManualInputSubmission:
        return ManualInputSubmission(
            period_type=self.period_type,
            granularity=self.granularity,
            rows=tuple(row.to_domain(self.granularity) for row in self.rows),
            channel_rows=tuple(row.to_domain() for row in self.channel_rows),
            currency=(self.currency or settings.default_currency).upper(),
            timezone=self.timezone or settings.default_timezone,
            mapping=self.mapping.to_domain(),
        )


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class ValidationIssueResponse(BaseModel):
    """
    API response model for one row-level validation issue.
    """

    field: str
    message: str
    severity: Literal["error", "warning"]

    @classmethod
    def from_domain(cls, issue: ValidationIssue) -> ValidationIssueResponse:
        return cls(field=issue.field, message=issue.message, severity=issue.severity)


class ManualInputPreviewResponse(BaseModel):
    valid: bool
    issues: list[ValidationIssueResponse] = Field(default_factory=list)
    snapshot: dict[str, Any] | None = None
    currency_symbol: str | None = None
    formatted_metrics: dict[str, str] = Field(default_factory=dict)


class ManualInputSubmitResponse(BaseModel):
    status: Literal["ok"] = "ok"
    snapshot: dict[str, Any]
    issues: list[ValidationIssueResponse] = Field(default_factory=list)
    currency_symbol: str
    formatted_metrics: dict[str, str] = Field(default_factory=dict)
    row_count: int = Field(..., ge=0)
    channel_row_count: int = Field(..., ge=0)


class ManualInputStoredResponse(BaseModel):
    owner_id: str
    period_type: str
    granularity: str
    rows: list[MetricRowPayload] = Field(default_factory=list)
    channel_rows: list[ChannelRowPayload] = Field(default_factory=list)
    snapshot: dict[str, Any]
    currency_symbol: str | None = None
    updated_at: datetime | None = None


class PeriodGridResponse(BaseModel):
    period_type: str
    granularity: str
    periods: list[MetricRowPayload] = Field(default_factory=list)

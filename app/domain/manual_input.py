"""
app/domain/manual_input.py

Domain models for the manual funnel input flow.

Raw rows (``MetricRow``, ``ChannelRow``) are produced fresh for every
submission and never mutated afterwards.  Derived records
(``AggregateTotals``, ``ChannelAggregate``, ``DerivedMetrics``,
``Snapshot``) are frozen and carry an explicit value for every field:
``None`` means "not computable", never "omitted".
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from datetime import date
from typing import Any


class PeriodType:
    DAYS_7 = "7days"
    DAYS_30 = "30days"
    DAYS_90 = "90days"


PERIOD_DAYS: dict[str, int] = {
    PeriodType.DAYS_7: 7,
    PeriodType.DAYS_30: 30,
    PeriodType.DAYS_90: 90,
}


class Granularity:
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


ALLOWED_GRANULARITIES = {Granularity.DAY, Granularity.WEEK, Granularity.MONTH}


class ChannelType:
    SOCIAL = "social"
    SEARCH = "search"
    ORGANIC = "organic"
    DIRECT = "direct"
    CUSTOM = "custom"


DEFAULT_CHANNELS: dict[str, str] = {
    "Instagram": ChannelType.SOCIAL,
    "TikTok": ChannelType.SOCIAL,
    "Facebook": ChannelType.SOCIAL,
    "Google Ads": ChannelType.SEARCH,
    "Yandex Direct": ChannelType.SEARCH,
    "YouTube": ChannelType.SOCIAL,
    "Telegram": ChannelType.SOCIAL,
    "VK": ChannelType.SOCIAL,
    "Organic": ChannelType.ORGANIC,
    "Direct": ChannelType.DIRECT,
}

def resolve_channel_type(channel_name: str) -> str:
    """Catalog type for a known channel name, ``custom`` otherwise."""
    return DEFAULT_CHANNELS.get(channel_name.strip(), ChannelType.CUSTOM)


class Severity:
    ERROR = "error"
    WARNING = "warning"


class ValidationMode:
    """
    Which rule set the row validator applies.

    ``INTERACTIVE`` is the data-entry flow and includes warning-level
    rules; ``ACCEPTANCE`` is the server-side persistence gate and only
    evaluates blocking rules.
    """

    INTERACTIVE = "interactive"
    ACCEPTANCE = "acceptance"


class GateStatus:
    SANDBOX = "SANDBOX"
    # Tiers used by snapshots built from automated sources.
    A = "A"
    B = "B"
    C = "C"


DATA_MODE_MANUAL = "MANUAL_SANDBOX"

TRAFFIC_FIELDS: tuple[str, ...] = (
    "sessions",
    "users",
    "clicks",
    "impressions",
    "organic_sessions",
    "paid_sessions",
)
FUNNEL_FIELDS: tuple[str, ...] = ("leads", "deals", "sales", "repeat_sales")
FINANCIAL_FIELDS: tuple[str, ...] = ("revenue", "ad_spend", "total_budget", "cogs")
METRIC_ROW_NUMERIC_FIELDS: tuple[str, ...] = TRAFFIC_FIELDS + FUNNEL_FIELDS + FINANCIAL_FIELDS

CHANNEL_ROW_NUMERIC_FIELDS: tuple[str, ...] = (
    "sessions",
    "clicks",
    "impressions",
    "leads",
    "ad_spend",
)

# Largest values the storage columns hold: Integer counts, Numeric(18, 4) amounts.
MAX_COUNT_VALUE = 2**31 - 1
MAX_AMOUNT_VALUE = 10**14


# ---------------------------------------------------------------------------
# Raw input rows
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MetricRow:
    """
    One reporting period of manually entered funnel data.

    Every numeric field is nullable: ``None`` means "not supplied" while
    ``0`` means "supplied as zero".  The quality scorer relies on that
    distinction.
    """

    period_index: int
    period_date: date | None = None
    period_label: str = ""
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

    def has_any(self, *names: str) -> bool:
        """Return True when at least one of *names* was supplied."""
        return any(getattr(self, name) is not None for name in names)


@dataclass(frozen=True)
class ChannelRow:
    """
    One channel's traffic and spend for one period.

    Channel rows carry no sales or revenue.
    """

    period_index: int
    channel_name: str
    channel_type: str = ChannelType.CUSTOM
    period_label: str = ""
    sessions: int | None = None
    clicks: int | None = None
    impressions: int | None = None
    leads: int | None = None
    ad_spend: float | None = None


@dataclass(frozen=True)
class EventMapping:
    """
    The user's choice of which tracked events count as lead/deal/sale.

    Passed through to the snapshot untouched.
    """

    sale_event_type: str = "paid_order"
    lead_event_type: str = "form_submit"
    deal_event_type: str = "deal_created"
    repeat_window: int = 30


@dataclass(frozen=True)
class ValidationIssue:
    """
    One row-level validation finding.

    ``field`` has the form ``row-{position}-{column}`` so a caller can
    highlight the exact cell.
    """

    field: str
    message: str
    severity: str

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR


# ---------------------------------------------------------------------------
# Derived records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AggregateTotals:
    """Window totals; nulls are summed as zero."""

    period_days: int
    sessions: int = 0
    users: int = 0
    clicks: int = 0
    impressions: int = 0
    organic_sessions: int = 0
    paid_sessions: int = 0
    leads: int = 0
    deals: int = 0
    sales: int = 0
    repeat_sales: int = 0
    revenue: float = 0.0
    ad_spend: float = 0.0
    total_budget: float = 0.0
    cogs: float = 0.0

    def as_inputs(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ChannelAggregate:
    channel_name: str
    channel_type: str
    sessions: int
    clicks: int
    impressions: int
    leads: int
    ad_spend: float
    cpc: float | None
    cpl: float | None
    cpm: float | None
    cr: float | None
    share_of_traffic: float
    sales: int = 0
    revenue: float = 0.0


@dataclass(frozen=True)
class DerivedMetrics:
    """
    KPIs derived from :class:`AggregateTotals`.

    Percentages are expressed as ratio x 100.  A metric is ``None`` when
    its denominator is zero or itself not computable.
    """

    cr_session_lead: float | None
    cr_lead_deal: float | None
    cr_deal_sale: float | None
    cr_session_sale: float | None
    cr_click_lead: float | None
    cpc: float | None
    cpu: float | None
    cpl: float | None
    cpd: float | None
    cps: float | None
    cac: float | None
    cpm: float | None
    roi: float | None
    romi: float | None
    roas: float | None
    gross_profit: float | None
    net_profit: float | None
    ebitda: float | None
    repeat_rate: float | None
    atp: float | None
    sph: float | None
    ltv: float | None
    ebitda_margin: float | None
    gross_margin: float | None
    ctr: float | None
    organic_traffic_share: float | None
    paid_traffic_share: float | None
    daily_sales: float | None
    daily_revenue: float | None
    ltv_cac_ratio: float | None
    effective_budget: float | None

    @classmethod
    def names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def to_payload(self, units: dict[str, str]) -> dict[str, dict[str, Any]]:
        """
        Serialise into the ``{name: {"value": ..., "unit": ...}}`` shape
        stored alongside the snapshot.
        """
        return {
            name: {"value": getattr(self, name), "unit": units.get(name, "ratio")}
            for name in self.names()
        }


@dataclass(frozen=True)
class PeriodPoint:
    """One point of the per-period chart series."""

    period_index: int
    period_date: date | None
    period_label: str
    sessions: int
    leads: int
    sales: int
    revenue: float
    ad_spend: float


@dataclass(frozen=True)
class Snapshot:
    """
    Assembled engine output for one submission.

    A new submission replaces the previous snapshot for the same owner
    entirely; nothing is merged.
    """

    period_type: str
    granularity: str
    currency: str
    timezone: str
    mapping: EventMapping
    totals: AggregateTotals
    metrics: DerivedMetrics
    channels: tuple[ChannelAggregate, ...]
    period_series: tuple[PeriodPoint, ...]
    data_quality_score: int
    gate_status: str
    data_mode: str = DATA_MODE_MANUAL

    def to_dict(self) -> dict[str, Any]:
        """
        Return a JSON-ready dict in which every field is present.
        """
        payload = asdict(self)
        payload["channels"] = [asdict(c) for c in self.channels]
        payload["period_series"] = [
            {**asdict(p), "period_date": p.period_date.isoformat() if p.period_date else None}
            for p in self.period_series
        ]
        return payload


@dataclass(frozen=True)
class ComputeResult:
    """
    Engine result: all issues found plus the snapshot.

    ``snapshot`` is ``None`` whenever at least one error-severity issue
    exists; the caller must then persist nothing.
    """

    issues: tuple[ValidationIssue, ...] = field(default_factory=tuple)
    snapshot: Snapshot | None = None

    @property
    def errors(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.is_error]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if not issue.is_error]

    @property
    def has_errors(self) -> bool:
        return any(issue.is_error for issue in self.issues)

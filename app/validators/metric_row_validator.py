"""
app/validators/metric_row_validator.py

Funnel consistency checks for manually entered period rows.
"""

from __future__ import annotations

import math
from typing import Sequence

from app.domain.manual_input import (
    CHANNEL_ROW_NUMERIC_FIELDS,
    FINANCIAL_FIELDS,
    MAX_AMOUNT_VALUE,
    MAX_COUNT_VALUE,
    METRIC_ROW_NUMERIC_FIELDS,
    ChannelRow,
    MetricRow,
    Severity,
    ValidationIssue,
    ValidationMode,
)

# (upper stage, lower stage, message); lower may never exceed upper.
FUNNEL_RULES: tuple[tuple[str, str, str], ...] = (
    ("sessions", "leads", "Leads cannot exceed sessions"),
    ("leads", "deals", "Deals cannot exceed leads"),
    ("deals", "sales", "Sales cannot exceed deals"),
    ("sales", "repeat_sales", "Repeat sales cannot exceed total sales"),
)

_FIELD_LABELS: dict[str, str] = {
    "sessions": "Sessions",
    "users": "Users",
    "clicks": "Clicks",
    "impressions": "Impressions",
    "organic_sessions": "Organic sessions",
    "paid_sessions": "Paid sessions",
    "leads": "Leads",
    "deals": "Deals",
    "sales": "Sales",
    "repeat_sales": "Repeat sales",
    "revenue": "Revenue",
    "ad_spend": "Ad spend",
    "total_budget": "Total budget",
    "cogs": "COGS",
}


class MetricRowValidator:
    """
    Validates funnel monotonicity and supporting-data rules per row.

    Rules only fire when every operand they compare was supplied; a
    ``None`` value never triggers a rule.  All findings are returned
    together so every offending cell can be fixed in one pass.
    """

    def validate(
        self,
        rows: Sequence[MetricRow],
        *,
        mode: str = ValidationMode.INTERACTIVE,
    ) -> list[ValidationIssue]:
        """
        Validate every row and return the issues in row order.

        ``mode=ValidationMode.ACCEPTANCE`` skips warning-level rules.
        """

        issues: list[ValidationIssue] = []
        for position, row in enumerate(rows):
            issues.extend(self.validate_row(row, position=position, mode=mode))
        return issues

    def validate_row(
        self,
        row: MetricRow,
        *,
        position: int,
        mode: str = ValidationMode.INTERACTIVE,
    ) -> list[ValidationIssue]:
        label = row.period_label or f"Period {position + 1}"
        issues = self._check_values(
            row, names=METRIC_ROW_NUMERIC_FIELDS, prefix=f"row-{position}", label=label
        )

        for upper, lower, message in FUNNEL_RULES:
            upper_value = getattr(row, upper)
            lower_value = getattr(row, lower)
            if upper_value is None or lower_value is None:
                continue
            if lower_value > upper_value:
                issues.append(
                    ValidationIssue(
                        field=f"row-{position}-{lower}",
                        message=f"{label}: {message}",
                        severity=Severity.ERROR,
                    )
                )

        if row.sales is not None and row.sales > 0 and not row.revenue:
            issues.append(
                ValidationIssue(
                    field=f"row-{position}-revenue",
                    message=f"{label}: Revenue is 0 but sales > 0",
                    severity=Severity.ERROR,
                )
            )

        if mode == ValidationMode.INTERACTIVE:
            if row.ad_spend is not None and row.ad_spend > 0 and not row.clicks:
                issues.append(
                    ValidationIssue(
                        field=f"row-{position}-clicks",
                        message=f"{label}: Ad spend present but no click data",
                        severity=Severity.WARNING,
                    )
                )

        return issues

    def validate_channel_rows(self, rows: Sequence[ChannelRow]) -> list[ValidationIssue]:
        """
        Reject negative, non-finite or unstorable channel values.
        """

        issues: list[ValidationIssue] = []
        for position, row in enumerate(rows):
            label = f"{row.channel_name} ({row.period_label or f'Period {row.period_index + 1}'})"
            issues.extend(
                self._check_values(
                    row,
                    names=CHANNEL_ROW_NUMERIC_FIELDS,
                    prefix=f"channel-{position}",
                    label=label,
                )
            )
        return issues

    @staticmethod
    def _check_values(
        row: MetricRow | ChannelRow,
        *,
        names: Sequence[str],
        prefix: str,
        label: str,
    ) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        for name in names:
            value = getattr(row, name)
            if value is None:
                continue
            if isinstance(value, float) and not math.isfinite(value):
                issues.append(
                    ValidationIssue(
                        field=f"{prefix}-{name}",
                        message=f"{label}: {_FIELD_LABELS[name]} must be a finite number",
                        severity=Severity.ERROR,
                    )
                )
            elif value < 0:
                issues.append(
                    ValidationIssue(
                        field=f"{prefix}-{name}",
                        message=f"{label}: {_FIELD_LABELS[name]} cannot be negative",
                        severity=Severity.ERROR,
                    )
                )
            elif name in FINANCIAL_FIELDS and value >= MAX_AMOUNT_VALUE:
                issues.append(
                    ValidationIssue(
                        field=f"{prefix}-{name}",
                        message=f"{label}: {_FIELD_LABELS[name]} must be less than {MAX_AMOUNT_VALUE:,}",
                        severity=Severity.ERROR,
                    )
                )
            elif name not in FINANCIAL_FIELDS and value > MAX_COUNT_VALUE:
                issues.append(
                    ValidationIssue(
                        field=f"{prefix}-{name}",
                        message=f"{label}: {_FIELD_LABELS[name]} cannot exceed {MAX_COUNT_VALUE:,}",
                        severity=Severity.ERROR,
                    )
                )
        return issues

"""
Typed DTOs returned by the manual input repository.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.domain.manual_input import ChannelRow, MetricRow


@dataclass(frozen=True)
class StoredManualInput:
    """
    Everything stored for one owner: the submitted rows in entry order and
    the serialized snapshot computed from them.
    """

    owner_id: str
    period_type: str
    granularity: str
    rows: tuple[MetricRow, ...]
    channel_rows: tuple[ChannelRow, ...]
    snapshot: dict[str, Any]
    metrics: dict[str, Any] = field(default_factory=dict)
    updated_at: datetime | None = None

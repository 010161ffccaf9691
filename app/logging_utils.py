"""
Structured logging helpers for manual input workflows.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from app.domain.manual_input import ValidationIssue


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON.
    """

    payload = {"event": event, **fields}
    logger.log(level, json.dumps(payload, default=str, sort_keys=True))


def summarize_issues(issues: list[ValidationIssue] | tuple[ValidationIssue, ...]) -> list[dict[str, str]]:
    """
    Flatten validation issues for a log payload.
    """

    return [
        {"field": issue.field, "severity": issue.severity, "message": issue.message}
        for issue in issues
    ]

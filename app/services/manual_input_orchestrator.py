"""
app/services/manual_input_orchestrator.py

Manual input pipeline orchestrator.

Wires SnapshotService → ManualInputRepository into a single transactional
submission.  No business logic lives here; every layer retains its own
responsibility:

    SnapshotService         – validation, aggregation, KPI derivation, scoring
    ManualInputRepository   – replace stored rows, upsert manual_snapshots

Failure contract
----------------
- Too many rows            → raises ManualInputLimitError before any work
- Blocking validation      → raises ManualInputValidationError; nothing persisted
- Persistence failure      → raises ManualInputPersistenceError after rollback

Warnings never block a submission.  The acceptance gate evaluates only
blocking rules, so a stored submission carries no warning-level issues;
``preview`` runs the interactive rule set for the data-entry flow.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import ManualInputSettings, get_manual_input_settings
from app.domain.manual_input import (
    ChannelRow,
    ComputeResult,
    EventMapping,
    MetricRow,
    Snapshot,
    ValidationIssue,
    ValidationMode,
)
from app.logging_utils import log_event, summarize_issues
from app.services.snapshot_service import SnapshotService
from db.repositories.errors import SnapshotNotFoundError
from db.repositories.manual_input_repository import ManualInputRepository
from db.repositories.types import StoredManualInput

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ManualInputValidationError(ValueError):
    """
    Raised when a submission contains at least one blocking issue.

    Carries every issue found so the caller can report them all at once.
    """

    def __init__(self, issues: Sequence[ValidationIssue]) -> None:
        self.issues = tuple(issues)
        errors = sum(1 for issue in self.issues if issue.is_error)
        super().__init__(f"Manual input rejected with {errors} blocking issue(s).")

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": str(self),
            "issues": summarize_issues(self.issues),
        }


class ManualInputLimitError(ValueError):
    """
    Raised when a submission has more rows than the configured limit.
    """


class ManualInputPersistenceError(RuntimeError):
    """
    Raised when the submission cannot be written.

    The session has been rolled back before this exception is raised.
    """


# ---------------------------------------------------------------------------
# Request / result dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ManualInputSubmission:
    """One complete manual input form as submitted by a user."""

    period_type: str
    granularity: str
    rows: tuple[MetricRow, ...]
    channel_rows: tuple[ChannelRow, ...] = ()
    currency: str = "USD"
    timezone: str = "Asia/Almaty"
    mapping: EventMapping = field(default_factory=EventMapping)


@dataclass(frozen=True)
class ManualInputRunResult:
    """
    Structured output of a successful submission.

    Attributes
    ----------
    owner_id:
        Owner the snapshot was stored for.
    snapshot:
        Engine output that was persisted.
    issues:
        Non-blocking issues found by the acceptance gate.
    row_count, channel_row_count:
        Number of rows stored.
    """

    owner_id: str
    snapshot: Snapshot
    issues: tuple[ValidationIssue, ...]
    row_count: int
    channel_row_count: int


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class ManualInputOrchestrator:
    """
    Coordinates validation, computation and persistence of manual input.

    The orchestrator is stateless with respect to business data.  The
    repository is passed per call because it is bound to a request-scoped
    database session.
    """

    def __init__(
        self,
        snapshot_service: SnapshotService | None = None,
        settings: ManualInputSettings | None = None,
    ) -> None:
        self._snapshot_service = snapshot_service or SnapshotService()
        self._settings = settings or get_manual_input_settings()

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------

    def preview(self, submission: ManualInputSubmission) -> ComputeResult:
        """
        Validate and compute without persisting.

        Uses the interactive rule set, so warnings are included.
        """
        self._check_limits(submission)
        return self._compute(submission, mode=ValidationMode.INTERACTIVE)

    def submit(
        self,
        owner_id: str,
        submission: ManualInputSubmission,
        *,
        repository: ManualInputRepository,
        db: Session,
    ) -> ManualInputRunResult:
        """
        Validate, compute and store one submission for *owner_id*.

        Steps
        -----
        1. Reject submissions over the configured row limits.
        2. Compute the snapshot with the acceptance rule set.
        3. Abort with every issue if any of them is blocking.
        4. Replace the owner's stored rows and snapshot.
        5. Commit the transaction.

        Raises
        ------
        ManualInputLimitError
            If the row limits are exceeded.
        ManualInputValidationError
            If any blocking issue was found.  Nothing is written.
        ManualInputPersistenceError
            If the write fails.  The session is rolled back.
        """
        self._check_limits(submission)

        run_start = time.monotonic()
        logger.info(
            "ManualInputOrchestrator.submit started owner=%r period_type=%r rows=%d channel_rows=%d",
            owner_id,
            submission.period_type,
            len(submission.rows),
            len(submission.channel_rows),
        )

        result = self._compute(submission, mode=ValidationMode.ACCEPTANCE)
        if result.has_errors or result.snapshot is None:
            if self._settings.log_validation_issues:
                log_event(
                    logger,
                    logging.WARNING,
                    "manual_input_rejected",
                    owner_id=owner_id,
                    error_count=len(result.errors),
                    issues=summarize_issues(result.errors),
                )
            raise ManualInputValidationError(result.issues)

        try:
            repository.save(
                owner_id,
                submission.rows,
                submission.channel_rows,
                result.snapshot,
            )
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error(
                "ManualInputOrchestrator.submit persistence failed owner=%r: %s",
                owner_id,
                exc,
            )
            raise ManualInputPersistenceError(
                f"Failed to store manual input for owner {owner_id!r}: {exc}"
            ) from exc

        log_event(
            logger,
            logging.INFO,
            "manual_input_stored",
            owner_id=owner_id,
            period_type=submission.period_type,
            granularity=submission.granularity,
            row_count=len(submission.rows),
            channel_row_count=len(submission.channel_rows),
            data_quality_score=result.snapshot.data_quality_score,
            elapsed_ms=round((time.monotonic() - run_start) * 1000, 1),
        )

        return ManualInputRunResult(
            owner_id=owner_id,
            snapshot=result.snapshot,
            issues=result.issues,
            row_count=len(submission.rows),
            channel_row_count=len(submission.channel_rows),
        )

    def load(
        self,
        owner_id: str,
        *,
        repository: ManualInputRepository,
    ) -> StoredManualInput:
        """
        Return the owner's stored input.

        Raises
        ------
        SnapshotNotFoundError
            If the owner has never submitted.
        """
        stored = repository.load(owner_id)
        if stored is None:
            raise SnapshotNotFoundError(owner_id)
        return stored

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _check_limits(self, submission: ManualInputSubmission) -> None:
        if len(submission.rows) > self._settings.max_rows:
            raise ManualInputLimitError(
                f"Too many period rows: {len(submission.rows)} > {self._settings.max_rows}"
            )
        if len(submission.channel_rows) > self._settings.max_channel_rows:
            raise ManualInputLimitError(
                "Too many channel rows: "
                f"{len(submission.channel_rows)} > {self._settings.max_channel_rows}"
            )

    def _compute(self, submission: ManualInputSubmission, *, mode: str) -> ComputeResult:
        return self._snapshot_service.compute(
            submission.rows,
            submission.channel_rows,
            period_type=submission.period_type,
            granularity=submission.granularity,
            currency=submission.currency,
            timezone=submission.timezone,
            mapping=submission.mapping,
            mode=mode,
        )

"""
app/api/routers/manual_input_router.py

Manual funnel input HTTP endpoints.

    GET  /manual-input/periods   empty period grid for the entry form
    POST /manual-input/validate  interactive validation + preview snapshot
    POST /manual-input           validate, compute and store a submission
    GET  /manual-input           the caller's stored rows and snapshot

Blocking validation issues are returned together as HTTP 400 so every
offending cell can be highlighted at once.
"""

from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.api.dependencies import (
    RequestContext,
    get_manual_input_orchestrator,
    get_manual_input_repository,
    get_request_context,
    get_settings,
)
from app.config import ManualInputSettings
from app.schemas.manual_input import (
    ChannelRowPayload,
    GranularityLiteral,
    ManualInputPreviewResponse,
    ManualInputRequest,
    ManualInputStoredResponse,
    ManualInputSubmitResponse,
    MetricRowPayload,
    PeriodGridResponse,
    PeriodTypeLiteral,
    ValidationIssueResponse,
)
from app.services.manual_input_orchestrator import (
    ManualInputLimitError,
    ManualInputOrchestrator,
    ManualInputPersistenceError,
    ManualInputValidationError,
)
from app.services.period_service import PeriodService
from app.services.presentation import currency_symbol, format_money_metrics
from db.repositories.errors import SnapshotNotFoundError
from db.repositories.manual_input_repository import ManualInputRepository
from db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/manual-input", tags=["manual-input"])


@router.get("/periods", response_model=PeriodGridResponse)
def get_period_grid(
    period_type: PeriodTypeLiteral = Query(...),
    granularity: GranularityLiteral = Query(...),
    anchor: date | None = Query(default=None, description="Start of the latest period; defaults to today"),
) -> PeriodGridResponse:
    """
    Return the empty rows a user fills in for the chosen window.
    """

    rows = PeriodService().build_periods(period_type, granularity, anchor or date.today())
    return PeriodGridResponse(
        period_type=period_type,
        granularity=granularity,
        periods=[MetricRowPayload.from_domain(row) for row in rows],
    )


@router.post("/validate", response_model=ManualInputPreviewResponse)
def validate_manual_input(
    body: ManualInputRequest,
    settings: ManualInputSettings = Depends(get_settings),
    orchestrator: ManualInputOrchestrator = Depends(get_manual_input_orchestrator),
) -> ManualInputPreviewResponse:
    """
    Run the interactive rule set and compute a preview without storing it.

    Always answers 200; ``valid`` is false when any issue is blocking.
    """

    submission = body.to_submission(settings)
    try:
        result = orchestrator.preview(submission)
    except ManualInputLimitError as exc:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=str(exc),
        ) from exc

    snapshot = result.snapshot
    return ManualInputPreviewResponse(
        valid=not result.has_errors,
        issues=[ValidationIssueResponse.from_domain(issue) for issue in result.issues],
        snapshot=snapshot.to_dict() if snapshot is not None else None,
        currency_symbol=currency_symbol(submission.currency),
        formatted_metrics=(
            format_money_metrics(snapshot.metrics, snapshot.currency) if snapshot is not None else {}
        ),
    )


@router.post("", response_model=ManualInputSubmitResponse)
def submit_manual_input(
    body: ManualInputRequest,
    context: RequestContext = Depends(get_request_context),
    settings: ManualInputSettings = Depends(get_settings),
    db: Session = Depends(get_db),
    repository: ManualInputRepository = Depends(get_manual_input_repository),
    orchestrator: ManualInputOrchestrator = Depends(get_manual_input_orchestrator),
) -> ManualInputSubmitResponse:
    """
    Validate, compute and store one submission for the calling owner.

    Raises HTTP 400 with every blocking issue, 413 over the row limits and
    500 when the write fails.
    """

    submission = body.to_submission(settings)
    try:
        result = orchestrator.submit(
            context.owner_id,
            submission,
            repository=repository,
            db=db,
        )
    except ManualInputValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.to_dict(),
        ) from exc
    except ManualInputLimitError as exc:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=str(exc),
        ) from exc
    except ManualInputPersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to store manual input.",
        ) from exc

    return ManualInputSubmitResponse(
        snapshot=result.snapshot.to_dict(),
        issues=[ValidationIssueResponse.from_domain(issue) for issue in result.issues],
        currency_symbol=currency_symbol(result.snapshot.currency),
        formatted_metrics=format_money_metrics(result.snapshot.metrics, result.snapshot.currency),
        row_count=result.row_count,
        channel_row_count=result.channel_row_count,
    )


@router.get("", response_model=ManualInputStoredResponse)
def get_manual_input(
    context: RequestContext = Depends(get_request_context),
    repository: ManualInputRepository = Depends(get_manual_input_repository),
    orchestrator: ManualInputOrchestrator = Depends(get_manual_input_orchestrator),
) -> ManualInputStoredResponse:
    """
    Return the caller's stored rows and latest snapshot; 404 if none.
    """

    try:
        stored = orchestrator.load(context.owner_id, repository=repository)
    except SnapshotNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc

    currency = stored.snapshot.get("currency")
    return ManualInputStoredResponse(
        owner_id=stored.owner_id,
        period_type=stored.period_type,
        granularity=stored.granularity,
        rows=[MetricRowPayload.from_domain(row) for row in stored.rows],
        channel_rows=[ChannelRowPayload.from_domain(row) for row in stored.channel_rows],
        snapshot=stored.snapshot,
        currency_symbol=currency_symbol(currency) if currency else None,
        updated_at=stored.updated_at,
    )

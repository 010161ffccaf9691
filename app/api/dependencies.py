"""
app/api/dependencies.py

Shared FastAPI dependencies for the manual input endpoints.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from app.config import ManualInputSettings, get_api_settings, get_manual_input_settings
from app.services.manual_input_orchestrator import ManualInputOrchestrator
from db.repositories.manual_input_repository import ManualInputRepository
from db.session import get_db


@dataclass(frozen=True)
class RequestContext:
    """
    Per-request caller identity.

    Built explicitly from the request and handed to handlers; nothing is
    kept in process-wide state between requests.
    """

    owner_id: str


def get_request_context(request: Request) -> RequestContext:
    """
    Resolve the owning company from the configured owner header.
    """

    header_name = get_api_settings().owner_header
    owner_id = (request.headers.get(header_name) or "").strip()
    if not owner_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing {header_name} header.",
        )
    if len(owner_id) > 64:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{header_name} must be at most 64 characters.",
        )
    return RequestContext(owner_id=owner_id)


def get_manual_input_repository(db: Session = Depends(get_db)) -> ManualInputRepository:
    return ManualInputRepository(db)


@lru_cache(maxsize=1)
def get_manual_input_orchestrator() -> ManualInputOrchestrator:
    """
    Shared orchestrator instance; it holds no per-request state.
    """

    return ManualInputOrchestrator()


def get_settings() -> ManualInputSettings:
    return get_manual_input_settings()

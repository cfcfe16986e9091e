# marketplace/api/v1/endpoints/applications.py
from typing import List
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from marketplace.api import deps
from marketplace.core.config import settings
from marketplace.core.limiter import limiter
from marketplace.core.permissions import Caller
from marketplace.db.session import get_db
from marketplace.schemas.application import (
    ApplicationCreate,
    ApplicationCreated,
    ApplicationDecision,
    ApplicationDecisionResult,
    ApplicationResponse,
)
from marketplace.services import applications as application_service

router = APIRouter(prefix="/applications", tags=["Applications"])


@router.post("", response_model=ApplicationCreated, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.APPLICATION_RATE_LIMIT)
def submit_application(
    request: Request,
    data: ApplicationCreate,
    db: Session = Depends(get_db),
    caller: Caller = Depends(deps.get_caller),
):
    """
    Apply to an open request on behalf of one of the caller's partners.

    **Errors**:
    - 403: caller does not own the partner
    - 409 `already_applied`: partner already applied
    - 409 `request_closed`: request is not open any more
    """
    application = application_service.submit(db, caller, data)
    return {"id": application.id}


@router.get("/mine", response_model=List[ApplicationResponse])
def list_my_applications(
    db: Session = Depends(get_db),
    caller: Caller = Depends(deps.get_caller),
):
    return application_service.list_mine(db, caller)


@router.get("/{applicationId}", response_model=ApplicationResponse)
def get_application(
    applicationId: str,
    db: Session = Depends(get_db),
    caller: Caller = Depends(deps.get_caller),
):
    return application_service.view(db, caller, applicationId)


@router.post("/{applicationId}/decision", response_model=ApplicationDecisionResult)
def decide_application(
    applicationId: str,
    data: ApplicationDecision,
    db: Session = Depends(get_db),
    caller: Caller = Depends(deps.get_caller),
):
    """
    Accept or decline an application. Accepting declines every other
    submitted application of the request and opens the conversation.
    """
    return application_service.decide(db, caller, applicationId, data.action, data.request_id)

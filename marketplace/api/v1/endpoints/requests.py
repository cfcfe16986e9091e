# marketplace/api/v1/endpoints/requests.py
"""Consumer service requests: create, browse, edit, lifecycle override, problem report."""
from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from marketplace.api import deps
from marketplace.core.permissions import Caller
from marketplace.db.session import get_db
from marketplace.schemas.application import ApplicationResponse
from marketplace.schemas.market_request import (
    MarketRequestCreate,
    MarketRequestCreated,
    MarketRequestList,
    MarketRequestResponse,
    MarketRequestStatusChange,
    MarketRequestUpdate,
    ProblemReport,
    StatusHistoryEntry,
)
from marketplace.services import applications as application_service
from marketplace.services import requests as request_service

router = APIRouter(prefix="/requests", tags=["Requests"])


@router.post("", response_model=MarketRequestCreated, status_code=status.HTTP_201_CREATED)
def create_request(
    data: MarketRequestCreate,
    db: Session = Depends(get_db),
    caller: Caller = Depends(deps.get_caller),
):
    """Create a new service request in status 'Anfrage'."""
    market_request = request_service.create_request(db, caller, data)
    return {"id": market_request.id, "title": market_request.title}


@router.get("/mine", response_model=MarketRequestList)
def list_my_requests(
    db: Session = Depends(get_db),
    caller: Caller = Depends(deps.get_caller),
):
    return {"requests": request_service.list_mine(db, caller)}


@router.get("/open", response_model=MarketRequestList)
def list_open_requests(
    db: Session = Depends(get_db),
    caller: Caller = Depends(deps.get_caller),
):
    """Requests partners can still apply to."""
    return {"requests": request_service.list_open(db, caller)}


@router.get("/{requestId}", response_model=MarketRequestResponse)
def get_request(
    requestId: str,
    db: Session = Depends(get_db),
    caller: Caller = Depends(deps.get_caller),
):
    return request_service.view_request(db, caller, requestId)


@router.patch("/{requestId}", response_model=MarketRequestResponse)
def update_request(
    requestId: str,
    data: MarketRequestUpdate,
    db: Session = Depends(get_db),
    caller: Caller = Depends(deps.get_caller),
):
    return request_service.update_request(db, caller, requestId, data)


@router.post("/{requestId}/status", response_model=MarketRequestResponse)
def change_request_status(
    requestId: str,
    data: MarketRequestStatusChange,
    db: Session = Depends(get_db),
    caller: Caller = Depends(deps.get_caller),
):
    """
    Lifecycle override for the owner (delete, restore, complete) or an admin.
    The move must still be an edge of the request state machine.
    """
    return request_service.change_status(db, caller, requestId, data.status.value, data.note)


@router.post("/{requestId}/problem", status_code=status.HTTP_201_CREATED)
def report_problem(
    requestId: str,
    data: ProblemReport,
    db: Session = Depends(get_db),
    caller: Caller = Depends(deps.get_caller),
):
    market_request = request_service.report_problem(db, caller, requestId, data.note)
    return {"ok": True, "status": market_request.status}


@router.get("/{requestId}/history", response_model=List[StatusHistoryEntry])
def get_request_history(
    requestId: str,
    db: Session = Depends(get_db),
    caller: Caller = Depends(deps.get_caller),
):
    return request_service.history(db, caller, requestId)


@router.get("/{requestId}/applications", response_model=List[ApplicationResponse])
def list_request_applications(
    requestId: str,
    db: Session = Depends(get_db),
    caller: Caller = Depends(deps.get_caller),
):
    return application_service.list_for_request(db, caller, requestId)

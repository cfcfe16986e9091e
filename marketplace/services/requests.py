# marketplace/services/requests.py
import logging
from typing import List

from sqlalchemy.orm import Session

from marketplace.constants.market import RequestStatus
from marketplace.core.config import settings
from marketplace.core.errors import Forbidden, NotFound, ValidationFailed
from marketplace.core.permissions import (
    Caller,
    ensure_conversation_participant,
    ensure_request_owner,
)
from marketplace.crud import (
    crud_application,
    crud_conversation,
    crud_market_request,
    crud_status_history,
)
from marketplace.db.session import unit_of_work
from marketplace.models.market_request import MarketRequest
from marketplace.schemas.market_request import MarketRequestCreate, MarketRequestUpdate
from marketplace.schemas.message import ProblemReported
from marketplace.services import lifecycle
from marketplace.services.ledger import append_event

logger = logging.getLogger(__name__)

# Targets a request owner may pick through the status endpoint. Admins may
# request any edge of the transition table.
OWNER_STATUS_TARGETS = {
    RequestStatus.GELOESCHT.value,
    RequestStatus.ANFRAGE.value,
    RequestStatus.ABGESCHLOSSEN.value,
}


def get_request(db: Session, request_id: str) -> MarketRequest:
    market_request = crud_market_request.get(db, request_id)
    if not market_request:
        raise NotFound(token="request_not_found", message="Request not found.")
    return market_request


def _check_text(request_text: str) -> str:
    request_text = (request_text or "").strip()
    if len(request_text) < settings.REQUEST_TEXT_MIN_LENGTH:
        raise ValidationFailed(
            token="request_text_too_short",
            message=f"request_text needs at least {settings.REQUEST_TEXT_MIN_LENGTH} characters.",
        )
    return request_text


def _check_budget(market_request: MarketRequest, data: MarketRequestUpdate) -> None:
    # A partial update is checked against the stored other half of the range.
    sent = data.model_dump(exclude_unset=True)
    budget_min = sent.get("budget_min", market_request.budget_min)
    budget_max = sent.get("budget_max", market_request.budget_max)
    if budget_min is not None and budget_max is not None and budget_min > budget_max:
        raise ValidationFailed(
            token="invalid_budget_range",
            message="budget_min must be <= budget_max.",
        )


def create_request(db: Session, caller: Caller, data: MarketRequestCreate) -> MarketRequest:
    data = data.model_copy(update={"request_text": _check_text(data.request_text)})
    with unit_of_work(db):
        market_request = crud_market_request.create(db, user_id=caller.user_id, data=data)
    db.refresh(market_request)
    logger.info(f"Request {market_request.id} created by {caller.user_id}")
    return market_request


def view_request(db: Session, caller: Caller, request_id: str) -> MarketRequest:
    """Owner, admin, or any partner of the caller that applied to it."""
    market_request = get_request(db, request_id)
    if caller.is_admin or market_request.user_id == caller.user_id:
        return market_request
    applicant_ids = {a.partner_id for a in crud_application.list_by_request(db, request_id)}
    if applicant_ids & caller.partner_ids:
        return market_request
    # Partners may read requests that are still open for applications.
    if caller.partner_ids and market_request.status == RequestStatus.ANFRAGE.value:
        return market_request
    raise Forbidden(message="Not allowed: request is not visible to you.")


def update_request(
    db: Session, caller: Caller, request_id: str, data: MarketRequestUpdate
) -> MarketRequest:
    market_request = get_request(db, request_id)
    ensure_request_owner(caller, market_request)
    if data.request_text is not None:
        data = data.model_copy(update={"request_text": _check_text(data.request_text)})
    _check_budget(market_request, data)
    with unit_of_work(db):
        crud_market_request.update(db, market_request=market_request, data=data)
    db.refresh(market_request)
    return market_request


def change_status(
    db: Session, caller: Caller, request_id: str, new_status: str, note: str = None
) -> MarketRequest:
    """Owner/admin lifecycle override: delete, restore, complete."""
    market_request = get_request(db, request_id)
    ensure_request_owner(caller, market_request)
    if not caller.is_admin and new_status not in OWNER_STATUS_TARGETS:
        raise Forbidden(message=f"Only admins may set status '{new_status}'.")

    with unit_of_work(db):
        locked = crud_market_request.get_for_update(db, request_id)
        lifecycle.transition_request(
            db, locked, new_status, changed_by=caller.user_id, note=note
        )
    db.refresh(market_request)
    return market_request


def report_problem(db: Session, caller: Caller, request_id: str, note: str) -> MarketRequest:
    note = (note or "").strip()
    if len(note) < settings.PROBLEM_NOTE_MIN_LENGTH:
        raise ValidationFailed(
            token="note_too_short",
            message=f"Please describe the problem in at least {settings.PROBLEM_NOTE_MIN_LENGTH} characters.",
        )

    market_request = get_request(db, request_id)
    conversation = crud_conversation.get_by_request(db, request_id)
    if conversation:
        ensure_conversation_participant(caller, conversation)
    else:
        ensure_request_owner(caller, market_request)

    with unit_of_work(db):
        locked = crud_market_request.get_for_update(db, request_id)
        lifecycle.transition_request(
            db,
            locked,
            RequestStatus.PROBLEM.value,
            changed_by=caller.user_id,
            note=note,
            escalate=True,
        )
        if conversation:
            append_event(
                db,
                conversation=conversation,
                sender_user_id=caller.user_id,
                event=ProblemReported(note=note),
            )
    db.refresh(market_request)
    logger.info(f"Problem reported on request {request_id} by {caller.user_id}")
    return market_request


def list_mine(db: Session, caller: Caller) -> List[MarketRequest]:
    return crud_market_request.list_by_user(db, caller.user_id)


def list_open(db: Session, caller: Caller) -> List[MarketRequest]:
    if not (caller.is_admin or caller.partner_ids):
        raise Forbidden(message="Only partners can browse open requests.")
    return crud_market_request.list_open(db)


def history(db: Session, caller: Caller, request_id: str):
    market_request = get_request(db, request_id)
    ensure_request_owner(caller, market_request)
    return crud_status_history.list_by_request(db, request_id)

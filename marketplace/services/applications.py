# marketplace/services/applications.py
"""
Partner applications and the accept/decline decision.

Accepting is the one correctness-critical path: it locks the request row,
refuses when another application already holds ``accepted``, swaps the target
from ``submitted`` to ``accepted`` in a single UPDATE, declines the siblings,
activates the request and opens the conversation. All of it commits together.
The partial unique index on accepted applications backs this up when two
transactions race past the lock.
"""
import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from marketplace.constants.market import (
    OPEN_REQUEST_STATUSES,
    ApplicationStatus,
    RequestStatus,
)
from marketplace.core.errors import Conflict, Forbidden, NotFound, ValidationFailed
from marketplace.core.permissions import Caller, ensure_partner_owner, ensure_request_owner
from marketplace.crud import (
    crud_application,
    crud_conversation,
    crud_market_request,
    crud_partner,
)
from marketplace.db.session import unit_of_work
from marketplace.models.market_application import MarketApplication
from marketplace.schemas.application import ApplicationCreate, ApplicationDecisionResult
from marketplace.schemas.message import ApplicationAccepted
from marketplace.services import lifecycle
from marketplace.services.ledger import append_event
from marketplace.services.requests import get_request
from marketplace.utils.event_rendering import text_to_html

logger = logging.getLogger(__name__)


def get_application(db: Session, application_id: str) -> MarketApplication:
    application = crud_application.get(db, application_id)
    if not application:
        raise NotFound(token="application_not_found", message="Application not found.")
    return application


def submit(db: Session, caller: Caller, data: ApplicationCreate) -> MarketApplication:
    if not crud_partner.get(db, data.partner_id):
        raise NotFound(token="partner_not_found", message="Partner not found.")
    ensure_partner_owner(caller, data.partner_id)
    get_request(db, data.request_id)

    message_text = (data.message_text or "").strip() or None
    message_html = text_to_html(message_text) if message_text else None

    try:
        with unit_of_work(db):
            market_request = crud_market_request.get_for_update(db, data.request_id)
            if market_request.status not in OPEN_REQUEST_STATUSES:
                raise Conflict(
                    token="request_closed",
                    message="This request no longer accepts applications.",
                )
            if crud_application.get_by_request_partner(db, data.request_id, data.partner_id):
                raise Conflict(
                    token="already_applied",
                    message="This partner already applied to the request.",
                )
            application = crud_application.create(
                db,
                request_id=data.request_id,
                partner_id=data.partner_id,
                message_text=message_text,
                message_html=message_html,
            )
            crud_market_request.increment_applications(db, market_request=market_request)
    except IntegrityError:
        logger.info(f"Duplicate application for {data.request_id}/{data.partner_id}")
        raise Conflict(token="already_applied", message="This partner already applied to the request.")

    db.refresh(application)
    logger.info(f"Application {application.id} submitted by partner {data.partner_id}")
    return application


def view(db: Session, caller: Caller, application_id: str) -> MarketApplication:
    application = get_application(db, application_id)
    if (
        caller.is_admin
        or caller.owns_partner(application.partner_id)
        or application.request.user_id == caller.user_id
    ):
        return application
    raise Forbidden(message="Not allowed: application is not visible to you.")


def list_for_request(db: Session, caller: Caller, request_id: str) -> List[MarketApplication]:
    market_request = get_request(db, request_id)
    ensure_request_owner(caller, market_request)
    return crud_application.list_by_request(db, request_id)


def list_mine(db: Session, caller: Caller) -> List[MarketApplication]:
    return crud_application.list_by_partners(db, caller.partner_ids)


def decide(
    db: Session, caller: Caller, application_id: str, action: str, request_id: str
) -> ApplicationDecisionResult:
    application = get_application(db, application_id)
    if application.request_id != request_id:
        raise ValidationFailed(
            token="request_mismatch",
            message="Application does not belong to this request.",
        )
    market_request = get_request(db, request_id)
    ensure_request_owner(caller, market_request)

    if action == "decline":
        return _decline(db, caller, application)
    return _accept(db, caller, application)


def _decline(
    db: Session, caller: Caller, application: MarketApplication
) -> ApplicationDecisionResult:
    with unit_of_work(db):
        market_request = crud_market_request.get_for_update(db, application.request_id)
        application = crud_application.get_for_update(db, application.id)
        lifecycle.transition_application(application, ApplicationStatus.DECLINED.value)
    logger.info(f"Application {application.id} declined by {caller.user_id}")
    return ApplicationDecisionResult(
        application_id=application.id,
        status=application.status,
        request_status=market_request.status,
    )


def _accept(db: Session, caller: Caller, application: MarketApplication) -> ApplicationDecisionResult:
    request_id = application.request_id
    try:
        with unit_of_work(db):
            market_request = crud_market_request.get_for_update(db, request_id)
            application = crud_application.get_for_update(db, application.id)

            if crud_application.get_accepted(db, request_id):
                raise Conflict(
                    token="already_accepted",
                    message="Another application has already been accepted for this request.",
                )
            lifecycle.validate_transition(
                lifecycle.APPLICATION_TRANSITIONS,
                "application",
                application.status,
                ApplicationStatus.ACCEPTED.value,
            )
            lifecycle.validate_transition(
                lifecycle.REQUEST_TRANSITIONS,
                "request",
                market_request.status,
                RequestStatus.AKTIV.value,
            )

            swapped = crud_application.compare_and_set_status(
                db,
                application_id=application.id,
                expected=ApplicationStatus.SUBMITTED.value,
                new_status=ApplicationStatus.ACCEPTED.value,
            )
            if not swapped:
                raise Conflict(
                    token="already_accepted",
                    message="The application changed while it was being accepted.",
                )

            declined_ids = crud_application.decline_siblings(
                db, request_id=request_id, accepted_id=application.id
            )
            lifecycle.transition_request(
                db,
                market_request,
                RequestStatus.AKTIV.value,
                changed_by=caller.user_id,
                note=f"application {application.id} accepted",
            )
            conversation = crud_conversation.get_or_create(
                db,
                request_id=request_id,
                partner_id=application.partner_id,
                consumer_user_id=market_request.user_id,
                application_id=application.id,
            )
            append_event(
                db,
                conversation=conversation,
                sender_user_id=caller.user_id,
                event=ApplicationAccepted(
                    application_id=application.id, partner_id=application.partner_id
                ),
            )
    except IntegrityError:
        logger.warning(f"Lost accept race on request {request_id}")
        raise Conflict(
            token="already_accepted",
            message="Another application has already been accepted for this request.",
        )

    logger.info(
        f"Application {application.id} accepted for request {request_id}; "
        f"declined {len(declined_ids)} sibling(s)"
    )
    return ApplicationDecisionResult(
        application_id=application.id,
        status=ApplicationStatus.ACCEPTED.value,
        request_status=RequestStatus.AKTIV.value,
        conversation_id=conversation.id,
        declined_application_ids=declined_ids,
    )

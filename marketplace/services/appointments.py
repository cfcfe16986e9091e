# marketplace/services/appointments.py
import logging
from typing import List

from sqlalchemy.orm import Session

from marketplace.constants.market import AppointmentStatus, RequestStatus
from marketplace.core.errors import NotFound
from marketplace.core.permissions import (
    Caller,
    ensure_conversation_consumer,
    ensure_conversation_partner,
    ensure_conversation_participant,
)
from marketplace.crud import crud_appointment, crud_market_request
from marketplace.db.session import unit_of_work
from marketplace.models.market_appointment import MarketAppointment
from marketplace.schemas.appointment import AppointmentCreate
from marketplace.schemas.message import (
    AppointmentConfirmed,
    AppointmentDeclined,
    AppointmentProposed,
)
from marketplace.services import lifecycle
from marketplace.services.chat import get_conversation
from marketplace.services.ledger import append_event

logger = logging.getLogger(__name__)

_APPOINTMENT_STATUSES = {
    RequestStatus.TERMIN_ANGELEGT.value,
    RequestStatus.TERMIN_BESTAETIGT.value,
}


def _get_appointment(db: Session, request_id: str, appointment_id: str) -> MarketAppointment:
    appointment = crud_appointment.get(db, appointment_id)
    if not appointment or appointment.request_id != request_id:
        raise NotFound(token="appointment_not_found", message="Appointment not found.")
    return appointment


def propose(
    db: Session, caller: Caller, request_id: str, data: AppointmentCreate
) -> MarketAppointment:
    conversation = get_conversation(db, request_id)
    ensure_conversation_partner(caller, conversation)

    with unit_of_work(db):
        market_request = crud_market_request.get_for_update(db, request_id)
        appointment = crud_appointment.create(
            db, request_id=request_id, created_by_user_id=caller.user_id, data=data
        )
        lifecycle.transition_request(
            db,
            market_request,
            RequestStatus.TERMIN_ANGELEGT.value,
            changed_by=caller.user_id,
        )
        crud_market_request.set_extras(
            db,
            market_request=market_request,
            appointment_id=appointment.id,
            appointment_confirmed=False,
        )
        append_event(
            db,
            conversation=conversation,
            sender_user_id=caller.user_id,
            event=AppointmentProposed(
                appointment_id=appointment.id,
                start_at=appointment.start_at,
                appointment_kind=appointment.kind,
                title=appointment.title,
            ),
        )
    db.refresh(appointment)
    logger.info(f"Appointment {appointment.id} proposed for request {request_id}")
    return appointment


def confirm(db: Session, caller: Caller, request_id: str, appointment_id: str) -> MarketAppointment:
    conversation = get_conversation(db, request_id)
    ensure_conversation_consumer(caller, conversation)
    appointment = _get_appointment(db, request_id, appointment_id)

    with unit_of_work(db):
        market_request = crud_market_request.get_for_update(db, request_id)
        appointment = crud_appointment.get_for_update(db, appointment.id)
        lifecycle.transition_appointment(appointment, AppointmentStatus.CONFIRMED.value)
        lifecycle.transition_request(
            db,
            market_request,
            RequestStatus.TERMIN_BESTAETIGT.value,
            changed_by=caller.user_id,
        )
        crud_market_request.set_extras(
            db,
            market_request=market_request,
            appointment_id=appointment.id,
            appointment_confirmed=True,
        )
        append_event(
            db,
            conversation=conversation,
            sender_user_id=caller.user_id,
            event=AppointmentConfirmed(appointment_id=appointment.id),
        )
    logger.info(f"Appointment {appointment.id} confirmed by {caller.user_id}")
    return appointment


def decline(db: Session, caller: Caller, request_id: str, appointment_id: str) -> MarketAppointment:
    """
    Decline a proposed or confirmed appointment.

    The request only falls back to ``Aktiv`` when the declined appointment is
    the one currently tracked in ``extras``; declining a superseded proposal
    leaves the request alone.
    """
    conversation = get_conversation(db, request_id)
    ensure_conversation_participant(caller, conversation)
    appointment = _get_appointment(db, request_id, appointment_id)

    with unit_of_work(db):
        market_request = crud_market_request.get_for_update(db, request_id)
        appointment = crud_appointment.get_for_update(db, appointment.id)
        lifecycle.transition_appointment(appointment, AppointmentStatus.DECLINED.value)

        current_id = (market_request.extras or {}).get("appointment_id")
        if current_id in (None, appointment.id):
            if market_request.status in _APPOINTMENT_STATUSES:
                lifecycle.transition_request(
                    db,
                    market_request,
                    RequestStatus.AKTIV.value,
                    changed_by=caller.user_id,
                )
            crud_market_request.set_extras(
                db, market_request=market_request, appointment_confirmed=False
            )
        append_event(
            db,
            conversation=conversation,
            sender_user_id=caller.user_id,
            event=AppointmentDeclined(appointment_id=appointment.id),
        )
    logger.info(f"Appointment {appointment.id} declined by {caller.user_id}")
    return appointment


def list_for_request(db: Session, caller: Caller, request_id: str) -> List[MarketAppointment]:
    conversation = get_conversation(db, request_id)
    ensure_conversation_participant(caller, conversation)
    return crud_appointment.list_by_request(db, request_id)

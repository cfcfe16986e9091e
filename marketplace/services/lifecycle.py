# marketplace/services/lifecycle.py
"""
Transition tables and the one write path per entity status.

Handlers never assign a status column directly; they call the matching
``transition_*`` function, which checks the edge against the table below and
raises ``InvalidTransition`` (409) when it is not allowed.
"""
import logging
from typing import Dict, Set, Optional

from sqlalchemy.orm import Session

from marketplace.constants.market import (
    ApplicationStatus,
    AppointmentStatus,
    OfferStatus,
    OrderStatus,
    RequestStatus as RS,
)
from marketplace.core.errors import InvalidTransition
from marketplace.crud import crud_status_history
from marketplace.models.market_application import MarketApplication
from marketplace.models.market_appointment import MarketAppointment
from marketplace.models.market_offer import MarketOffer
from marketplace.models.market_order import MarketOrder
from marketplace.models.market_request import MarketRequest

logger = logging.getLogger(__name__)

REQUEST_TRANSITIONS: Dict[str, Set[str]] = {
    RS.ANFRAGE.value: {RS.AKTIV.value, RS.PROBLEM.value, RS.GELOESCHT.value},
    RS.AKTIV.value: {
        RS.TERMIN_ANGELEGT.value,
        RS.AUFTRAG_ERSTELLT.value,
        RS.ANGEBOT_ERSTELLT.value,
        RS.ABGESCHLOSSEN.value,
        RS.PROBLEM.value,
        RS.GELOESCHT.value,
    },
    RS.TERMIN_ANGELEGT.value: {
        RS.TERMIN_ANGELEGT.value,
        RS.TERMIN_BESTAETIGT.value,
        RS.AKTIV.value,
        RS.AUFTRAG_ERSTELLT.value,
        RS.ANGEBOT_ERSTELLT.value,
        RS.PROBLEM.value,
    },
    RS.TERMIN_BESTAETIGT.value: {
        RS.TERMIN_ANGELEGT.value,
        RS.AKTIV.value,
        RS.AUFTRAG_ERSTELLT.value,
        RS.ANGEBOT_ERSTELLT.value,
        RS.PROBLEM.value,
    },
    RS.AUFTRAG_ERSTELLT.value: {
        RS.AUFTRAG_BESTAETIGT.value,
        RS.AUFTRAG_ABGELEHNT.value,
        RS.AUFTRAG_STORNIERT.value,
        RS.PROBLEM.value,
    },
    RS.AUFTRAG_BESTAETIGT.value: {RS.ABGESCHLOSSEN.value, RS.PROBLEM.value},
    RS.AUFTRAG_ABGELEHNT.value: {
        RS.TERMIN_ANGELEGT.value,
        RS.AUFTRAG_ERSTELLT.value,
        RS.ANGEBOT_ERSTELLT.value,
        RS.ABGESCHLOSSEN.value,
        RS.PROBLEM.value,
    },
    RS.AUFTRAG_STORNIERT.value: {
        RS.TERMIN_ANGELEGT.value,
        RS.AUFTRAG_ERSTELLT.value,
        RS.ANGEBOT_ERSTELLT.value,
        RS.ABGESCHLOSSEN.value,
        RS.PROBLEM.value,
    },
    RS.ANGEBOT_ERSTELLT.value: {
        RS.ANGEBOT_ANGENOMMEN.value,
        RS.ANGEBOT_ABGELEHNT.value,
        RS.TERMIN_ANGELEGT.value,
        RS.PROBLEM.value,
    },
    RS.ANGEBOT_ANGENOMMEN.value: {
        RS.ANGEBOT_ABGELEHNT.value,
        RS.AUFTRAG_ERSTELLT.value,
        RS.TERMIN_ANGELEGT.value,
        RS.ABGESCHLOSSEN.value,
        RS.PROBLEM.value,
    },
    RS.ANGEBOT_ABGELEHNT.value: {
        RS.ANGEBOT_ERSTELLT.value,
        RS.TERMIN_ANGELEGT.value,
        RS.AUFTRAG_ERSTELLT.value,
        RS.ABGESCHLOSSEN.value,
        RS.PROBLEM.value,
    },
    RS.ABGESCHLOSSEN.value: {RS.PROBLEM.value},
    RS.PROBLEM.value: {RS.AKTIV.value, RS.ABGESCHLOSSEN.value},
    RS.GELOESCHT.value: {RS.ANFRAGE.value},
}

APPLICATION_TRANSITIONS: Dict[str, Set[str]] = {
    ApplicationStatus.SUBMITTED.value: {
        ApplicationStatus.ACCEPTED.value,
        ApplicationStatus.DECLINED.value,
    },
    # accepted and declined are terminal
}

APPOINTMENT_TRANSITIONS: Dict[str, Set[str]] = {
    AppointmentStatus.PROPOSED.value: {
        AppointmentStatus.CONFIRMED.value,
        AppointmentStatus.DECLINED.value,
    },
    AppointmentStatus.CONFIRMED.value: {AppointmentStatus.DECLINED.value},
}

ORDER_TRANSITIONS: Dict[str, Set[str]] = {
    OrderStatus.CREATED.value: {
        OrderStatus.ACCEPTED.value,
        OrderStatus.DECLINED.value,
        OrderStatus.CANCELED.value,
    },
}

# An accepted offer may still be declined (storno).
OFFER_TRANSITIONS: Dict[str, Set[str]] = {
    OfferStatus.CREATED.value: {OfferStatus.ACCEPTED.value, OfferStatus.DECLINED.value},
    OfferStatus.ACCEPTED.value: {OfferStatus.DECLINED.value},
}


def is_allowed(table: Dict[str, Set[str]], old_status: str, new_status: str) -> bool:
    return new_status in table.get(old_status, set())


def validate_transition(
    table: Dict[str, Set[str]], entity: str, old_status: str, new_status: str
) -> None:
    if not is_allowed(table, old_status, new_status):
        logger.warning(f"Rejected {entity} transition: {old_status} → {new_status}")
        raise InvalidTransition(entity, old_status, new_status)


def transition_request(
    db: Session,
    market_request: MarketRequest,
    new_status: str,
    *,
    changed_by: str,
    note: Optional[str] = None,
    escalate: bool = False,
):
    """
    Move a request to ``new_status`` and write the history row.

    ``escalate`` is used for problem reports: it lets a request enter
    ``Problem`` from every state except ``Gelöscht``.
    """
    old_status = market_request.status
    new_status = RS(new_status).value

    if escalate:
        if new_status != RS.PROBLEM.value or old_status == RS.GELOESCHT.value:
            logger.warning(f"Rejected escalation of request {market_request.id} from {old_status}")
            raise InvalidTransition("request", old_status, new_status)
    else:
        validate_transition(REQUEST_TRANSITIONS, "request", old_status, new_status)

    market_request.status = new_status
    entry = crud_status_history.record(
        db,
        request_id=market_request.id,
        old_status=old_status,
        new_status=new_status,
        changed_by=changed_by,
        note=note,
    )
    logger.info(f"Request {market_request.id}: {old_status} → {new_status} by {changed_by}")
    return entry


def transition_application(application: MarketApplication, new_status: str) -> None:
    validate_transition(APPLICATION_TRANSITIONS, "application", application.status, new_status)
    logger.info(f"Application {application.id}: {application.status} → {new_status}")
    application.status = new_status


def transition_appointment(appointment: MarketAppointment, new_status: str) -> None:
    validate_transition(APPOINTMENT_TRANSITIONS, "appointment", appointment.status, new_status)
    logger.info(f"Appointment {appointment.id}: {appointment.status} → {new_status}")
    appointment.status = new_status


def transition_order(order: MarketOrder, new_status: str) -> None:
    validate_transition(ORDER_TRANSITIONS, "order", order.status, new_status)
    logger.info(f"Order {order.id}: {order.status} → {new_status}")
    order.status = new_status


def transition_offer(offer: MarketOffer, new_status: str) -> None:
    validate_transition(OFFER_TRANSITIONS, "offer", offer.status, new_status)
    logger.info(f"Offer {offer.id}: {offer.status} → {new_status}")
    offer.status = new_status

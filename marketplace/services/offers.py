# marketplace/services/offers.py
"""
Offer sub-flow.

A partner puts up a priced offer before any order exists; the consumer
accepts or declines it. Only one offer per request waits for an answer at a
time. Accept and decline are idempotent, and an accepted offer may still be
declined while the request sits in 'Angebot angenommen'.
"""
import logging
from typing import List

from sqlalchemy.orm import Session

from marketplace.constants.market import OfferStatus, RequestStatus
from marketplace.core.errors import Conflict, NotFound
from marketplace.core.permissions import (
    Caller,
    ensure_conversation_consumer,
    ensure_conversation_partner,
    ensure_conversation_participant,
)
from marketplace.crud import crud_market_request, crud_offer
from marketplace.db.session import unit_of_work
from marketplace.models.market_offer import MarketOffer
from marketplace.schemas import message as events
from marketplace.schemas.offer import OfferCreate
from marketplace.services import lifecycle
from marketplace.services.chat import get_conversation
from marketplace.services.ledger import append_event
from marketplace.services.orders import compute_gross_total

logger = logging.getLogger(__name__)


def _get_offer(db: Session, offer_id: str) -> MarketOffer:
    offer = crud_offer.get(db, offer_id)
    if not offer:
        raise NotFound(token="offer_not_found", message="Offer not found.")
    return offer


def _money_event(event_cls, offer: MarketOffer):
    return event_cls(offer_id=offer.id, title=offer.title, gross_total=offer.gross_total)


def create(db: Session, caller: Caller, data: OfferCreate) -> MarketOffer:
    conversation = get_conversation(db, data.request_id)
    ensure_conversation_partner(caller, conversation)

    gross_total = compute_gross_total(
        data.net_total, data.tax_rate, data.discount_type.value, data.discount_value
    )

    with unit_of_work(db):
        market_request = crud_market_request.get_for_update(db, data.request_id)
        pending = crud_offer.get_open_for_request(db, data.request_id)
        if pending:
            raise Conflict(
                token="offer_pending",
                message="An offer for this request is still waiting for an answer.",
                details={"offer_id": pending.id},
            )
        offer = crud_offer.create(
            db, data=data, created_by_user_id=caller.user_id, gross_total=gross_total
        )
        lifecycle.transition_request(
            db,
            market_request,
            RequestStatus.ANGEBOT_ERSTELLT.value,
            changed_by=caller.user_id,
        )
        append_event(
            db,
            conversation=conversation,
            sender_user_id=caller.user_id,
            event=_money_event(events.OfferCreated, offer),
        )
    db.refresh(offer)
    logger.info(f"Offer {offer.id} created for request {data.request_id}, gross {gross_total}")
    return offer


def accept(db: Session, caller: Caller, offer_id: str) -> str:
    offer = _get_offer(db, offer_id)
    conversation = get_conversation(db, offer.request_id)
    ensure_conversation_consumer(caller, conversation)

    with unit_of_work(db):
        market_request = crud_market_request.get_for_update(db, offer.request_id)
        offer = crud_offer.get_for_update(db, offer_id)
        if offer.status == OfferStatus.ACCEPTED.value:
            return OfferStatus.ACCEPTED.value
        if offer.status == OfferStatus.DECLINED.value:
            raise Conflict(token="already_declined", message="Offer was already declined.")

        lifecycle.transition_offer(offer, OfferStatus.ACCEPTED.value)
        lifecycle.transition_request(
            db,
            market_request,
            RequestStatus.ANGEBOT_ANGENOMMEN.value,
            changed_by=caller.user_id,
        )
        append_event(
            db,
            conversation=conversation,
            sender_user_id=caller.user_id,
            event=events.OfferAccepted(offer_id=offer.id),
        )
    logger.info(f"Offer {offer_id} accepted by {caller.user_id}")
    return OfferStatus.ACCEPTED.value


def decline(db: Session, caller: Caller, offer_id: str) -> str:
    offer = _get_offer(db, offer_id)
    conversation = get_conversation(db, offer.request_id)
    ensure_conversation_consumer(caller, conversation)

    with unit_of_work(db):
        market_request = crud_market_request.get_for_update(db, offer.request_id)
        offer = crud_offer.get_for_update(db, offer_id)
        if offer.status == OfferStatus.DECLINED.value:
            return OfferStatus.DECLINED.value

        lifecycle.transition_offer(offer, OfferStatus.DECLINED.value)
        lifecycle.transition_request(
            db,
            market_request,
            RequestStatus.ANGEBOT_ABGELEHNT.value,
            changed_by=caller.user_id,
        )
        append_event(
            db,
            conversation=conversation,
            sender_user_id=caller.user_id,
            event=_money_event(events.OfferDeclined, offer),
        )
    logger.info(f"Offer {offer_id} declined by {caller.user_id}")
    return OfferStatus.DECLINED.value


def list_for_request(db: Session, caller: Caller, request_id: str) -> List[MarketOffer]:
    conversation = get_conversation(db, request_id)
    ensure_conversation_participant(caller, conversation)
    return crud_offer.list_by_request(db, request_id)

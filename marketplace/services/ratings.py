# marketplace/services/ratings.py
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from marketplace.core.config import settings
from marketplace.core.errors import Conflict, NotFound, ValidationFailed
from marketplace.core.permissions import (
    Caller,
    ensure_conversation_consumer,
    ensure_partner_owner,
)
from marketplace.crud import crud_partner, crud_rating
from marketplace.db.session import unit_of_work
from marketplace.models.market_partner_rating import MarketPartnerRating
from marketplace.schemas.message import RatingRequested, RatingSubmitted
from marketplace.schemas.rating import RatingSubmit
from marketplace.services.chat import get_conversation
from marketplace.services.ledger import append_event

logger = logging.getLogger(__name__)


def request_rating(db: Session, caller: Caller, request_id: str) -> None:
    """Partner asks the consumer for a rating; shows up as a card in the chat."""
    conversation = get_conversation(db, request_id)
    ensure_partner_owner(caller, conversation.partner_id)

    with unit_of_work(db):
        append_event(
            db,
            conversation=conversation,
            sender_user_id=caller.user_id,
            event=RatingRequested(request_id=request_id),
        )
    logger.info(f"Rating requested for request {request_id} by {caller.user_id}")


def submit(db: Session, caller: Caller, data: RatingSubmit) -> MarketPartnerRating:
    if not settings.RATING_MIN <= data.stars <= settings.RATING_MAX:
        raise ValidationFailed(
            token="invalid_stars",
            message=f"stars must be between {settings.RATING_MIN} and {settings.RATING_MAX}.",
        )

    conversation = get_conversation(db, data.request_id)
    ensure_conversation_consumer(caller, conversation)

    if crud_rating.get_by_request_consumer(db, data.request_id, caller.user_id):
        raise Conflict(token="already_rated", message="You already rated this request.")

    partner = crud_partner.get(db, conversation.partner_id)
    if not partner:
        raise NotFound(token="partner_not_found", message="Partner not found.")

    try:
        with unit_of_work(db):
            rating = crud_rating.create(
                db,
                partner_id=partner.id,
                request_id=data.request_id,
                consumer_user_id=caller.user_id,
                stars=data.stars,
                text=(data.text or "").strip() or None,
                name=(data.name or "").strip() or None,
            )
            crud_partner.recalculate_rating(db, partner=partner)
            append_event(
                db,
                conversation=conversation,
                sender_user_id=caller.user_id,
                event=RatingSubmitted(request_id=data.request_id, stars=data.stars),
            )
    except IntegrityError:
        raise Conflict(token="already_rated", message="You already rated this request.")

    logger.info(
        f"Partner {partner.id} rated {data.stars} for request {data.request_id}; "
        f"average now {partner.rating_avg} over {partner.rating_count}"
    )
    return rating

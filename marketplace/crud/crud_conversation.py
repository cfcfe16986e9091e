# marketplace/crud/crud_conversation.py
from typing import Optional, List, Iterable
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import or_

from marketplace.core.retry import retry_read
from marketplace.models.market_conversation import MarketConversation


@retry_read
def get_by_request(db: Session, request_id: str) -> Optional[MarketConversation]:
    return (
        db.query(MarketConversation)
        .filter(MarketConversation.request_id == request_id)
        .first()
    )


def get_or_create(
    db: Session,
    *,
    request_id: str,
    partner_id: str,
    consumer_user_id: str,
    application_id: Optional[str] = None,
) -> MarketConversation:
    """Reuse the request's conversation, pointing it at the accepted partner."""
    conversation = (
        db.query(MarketConversation)
        .filter(MarketConversation.request_id == request_id)
        .first()
    )
    if conversation:
        conversation.partner_id = partner_id
        conversation.application_id = application_id
        db.flush()
        return conversation

    conversation = MarketConversation(
        request_id=request_id,
        partner_id=partner_id,
        consumer_user_id=consumer_user_id,
        application_id=application_id,
    )
    db.add(conversation)
    db.flush()
    return conversation


@retry_read
def list_for_user(
    db: Session, user_id: str, partner_ids: Iterable[str] = ()
) -> List[MarketConversation]:
    partner_ids = list(partner_ids)
    conditions = [MarketConversation.consumer_user_id == user_id]
    if partner_ids:
        conditions.append(MarketConversation.partner_id.in_(partner_ids))
    return (
        db.query(MarketConversation)
        .options(joinedload(MarketConversation.request))
        .filter(or_(*conditions))
        .order_by(
            MarketConversation.last_message_at.desc(),
            MarketConversation.created_at.desc(),
        )
        .all()
    )

# marketplace/crud/crud_rating.py
from typing import Optional
from sqlalchemy.orm import Session

from marketplace.models.market_partner_rating import MarketPartnerRating


def get_by_request_consumer(
    db: Session, request_id: str, consumer_user_id: str
) -> Optional[MarketPartnerRating]:
    return (
        db.query(MarketPartnerRating)
        .filter(
            MarketPartnerRating.request_id == request_id,
            MarketPartnerRating.consumer_user_id == consumer_user_id,
        )
        .first()
    )


def create(
    db: Session,
    *,
    partner_id: str,
    request_id: str,
    consumer_user_id: str,
    stars: int,
    text: Optional[str] = None,
    name: Optional[str] = None,
) -> MarketPartnerRating:
    db_obj = MarketPartnerRating(
        partner_id=partner_id,
        request_id=request_id,
        consumer_user_id=consumer_user_id,
        stars=stars,
        text=text,
        name=name,
    )
    db.add(db_obj)
    db.flush()
    return db_obj

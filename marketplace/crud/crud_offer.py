# marketplace/crud/crud_offer.py
import uuid
from decimal import Decimal
from typing import Optional, List
from sqlalchemy.orm import Session

from marketplace.constants.market import OfferStatus
from marketplace.core.retry import retry_read
from marketplace.models.market_offer import MarketOffer
from marketplace.schemas.offer import OfferCreate


def create(
    db: Session, *, data: OfferCreate, created_by_user_id: str, gross_total: Decimal
) -> MarketOffer:
    db_obj = MarketOffer(
        request_id=data.request_id,
        created_by_user_id=created_by_user_id,
        title=data.title.strip(),
        net_total=data.net_total,
        tax_rate=data.tax_rate,
        discount_type=data.discount_type.value,
        discount_value=data.discount_value,
        discount_label=data.discount_label,
        gross_total=gross_total,
        status=OfferStatus.CREATED.value,
        signature_id=f"offer_{uuid.uuid4()}",
    )
    db.add(db_obj)
    db.flush()
    return db_obj


def get(db: Session, offer_id: str) -> Optional[MarketOffer]:
    return db.query(MarketOffer).filter(MarketOffer.id == offer_id).first()


def get_for_update(db: Session, offer_id: str) -> Optional[MarketOffer]:
    return (
        db.query(MarketOffer)
        .filter(MarketOffer.id == offer_id)
        .with_for_update()
        .populate_existing()
        .first()
    )


def get_open_for_request(db: Session, request_id: str) -> Optional[MarketOffer]:
    """The offer still waiting for the consumer's answer, if any."""
    return (
        db.query(MarketOffer)
        .filter(
            MarketOffer.request_id == request_id,
            MarketOffer.status == OfferStatus.CREATED.value,
        )
        .first()
    )


@retry_read
def list_by_request(db: Session, request_id: str) -> List[MarketOffer]:
    return (
        db.query(MarketOffer)
        .filter(MarketOffer.request_id == request_id)
        .order_by(MarketOffer.created_at.desc())
        .all()
    )

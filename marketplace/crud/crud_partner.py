# marketplace/crud/crud_partner.py
from typing import Optional, List
from decimal import Decimal, ROUND_HALF_UP
from sqlalchemy.orm import Session
from sqlalchemy import func

from marketplace.core.retry import retry_read
from marketplace.models.partner import Partner
from marketplace.models.market_partner_rating import MarketPartnerRating


@retry_read
def get(db: Session, partner_id: str) -> Optional[Partner]:
    return db.query(Partner).filter(Partner.id == partner_id).first()


@retry_read
def list_ids_for_owner(db: Session, user_id: str) -> List[str]:
    rows = db.query(Partner.id).filter(Partner.owner_user_id == user_id).all()
    return [row.id for row in rows]


def recalculate_rating(db: Session, *, partner: Partner) -> Partner:
    """Recompute rating_avg/rating_count from all ratings of the partner."""
    avg, count = (
        db.query(func.avg(MarketPartnerRating.stars), func.count(MarketPartnerRating.id))
        .filter(MarketPartnerRating.partner_id == partner.id)
        .one()
    )
    partner.rating_count = count or 0
    partner.rating_avg = (
        Decimal(str(avg)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        if avg is not None
        else None
    )
    db.flush()
    return partner

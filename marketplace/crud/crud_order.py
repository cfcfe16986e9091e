# marketplace/crud/crud_order.py
from decimal import Decimal
from typing import Optional, List
from sqlalchemy.orm import Session

from marketplace.constants.market import ACTIVE_ORDER_STATUSES, OrderStatus
from marketplace.core.retry import retry_read
from marketplace.models.market_order import MarketOrder
from marketplace.schemas.order import OrderCreate


def create(db: Session, *, data: OrderCreate, gross_total: Decimal) -> MarketOrder:
    db_obj = MarketOrder(
        request_id=data.request_id,
        title=data.title.strip(),
        net_total=data.net_total,
        tax_rate=data.tax_rate,
        discount_type=data.discount_type.value,
        discount_value=data.discount_value,
        discount_label=data.discount_label,
        gross_total=gross_total,
        status=OrderStatus.CREATED.value,
    )
    db.add(db_obj)
    db.flush()
    return db_obj


def get(db: Session, order_id: str) -> Optional[MarketOrder]:
    return db.query(MarketOrder).filter(MarketOrder.id == order_id).first()


def get_for_update(db: Session, order_id: str) -> Optional[MarketOrder]:
    return (
        db.query(MarketOrder)
        .filter(MarketOrder.id == order_id)
        .with_for_update()
        .populate_existing()
        .first()
    )


def get_active_for_request(db: Session, request_id: str) -> Optional[MarketOrder]:
    return (
        db.query(MarketOrder)
        .filter(
            MarketOrder.request_id == request_id,
            MarketOrder.status.in_(ACTIVE_ORDER_STATUSES),
        )
        .order_by(MarketOrder.created_at.desc())
        .first()
    )


@retry_read
def list_by_request(db: Session, request_id: str) -> List[MarketOrder]:
    return (
        db.query(MarketOrder)
        .filter(MarketOrder.request_id == request_id)
        .order_by(MarketOrder.created_at.desc())
        .all()
    )

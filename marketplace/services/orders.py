# marketplace/services/orders.py
"""
Order sub-flow.

A request carries at most one active order (created or accepted). The
consumer answers it with accept, decline or a withdrawal (cancel) inside the
withdrawal window. Decline and cancel are idempotent: repeating them returns
the same result without touching the ledger again.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Tuple

from sqlalchemy.orm import Session

from marketplace.constants.market import DiscountType, OrderStatus, RequestStatus
from marketplace.core.config import settings
from marketplace.core.errors import Conflict, Forbidden, NotFound
from marketplace.core.permissions import (
    Caller,
    ensure_conversation_consumer,
    ensure_conversation_partner,
    ensure_conversation_participant,
)
from marketplace.crud import crud_market_request, crud_order
from marketplace.db.session import unit_of_work
from marketplace.models.market_conversation import MarketConversation
from marketplace.models.market_order import MarketOrder
from marketplace.schemas import message as events
from marketplace.schemas.order import OrderCreate
from marketplace.services import lifecycle
from marketplace.services.chat import get_conversation
from marketplace.services.ledger import append_event
from marketplace.utils.time import as_utc, utcnow

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def compute_gross_total(
    net_total: Decimal,
    tax_rate: Decimal,
    discount_type: str,
    discount_value: Decimal,
) -> Decimal:
    """(net - discount) * (1 + tax/100), discount never pushing below zero."""
    net_total = Decimal(str(net_total))
    discount_value = Decimal(str(discount_value or 0))
    if DiscountType(discount_type) == DiscountType.PERCENT:
        base = net_total * (1 - discount_value / 100)
    else:
        base = net_total - discount_value
    base = max(Decimal("0"), base)
    gross = base * (1 + Decimal(str(tax_rate or 0)) / 100)
    return gross.quantize(CENT, rounding=ROUND_HALF_UP)


def _get_order(db: Session, order_id: str) -> Tuple[MarketOrder, MarketConversation]:
    order = crud_order.get(db, order_id)
    if not order:
        raise NotFound(token="order_not_found", message="Order not found.")
    return order, get_conversation(db, order.request_id)


def _money_event(event_cls, order: MarketOrder):
    return event_cls(order_id=order.id, title=order.title, gross_total=order.gross_total)


def create(db: Session, caller: Caller, data: OrderCreate) -> Tuple[MarketOrder, bool]:
    """Returns ``(order, created)``; ``created`` is False for an existing active order."""
    conversation = get_conversation(db, data.request_id)
    ensure_conversation_partner(caller, conversation)

    gross_total = compute_gross_total(
        data.net_total, data.tax_rate, data.discount_type.value, data.discount_value
    )

    with unit_of_work(db):
        market_request = crud_market_request.get_for_update(db, data.request_id)
        existing = crud_order.get_active_for_request(db, data.request_id)
        if existing:
            logger.info(f"Order {existing.id} already active for request {data.request_id}")
            order, created = existing, False
        else:
            order = crud_order.create(db, data=data, gross_total=gross_total)
            lifecycle.transition_request(
                db,
                market_request,
                RequestStatus.AUFTRAG_ERSTELLT.value,
                changed_by=caller.user_id,
            )
            append_event(
                db,
                conversation=conversation,
                sender_user_id=caller.user_id,
                event=_money_event(events.OrderCreated, order),
            )
            created = True
    db.refresh(order)
    if created:
        logger.info(f"Order {order.id} created for request {data.request_id}, gross {gross_total}")
    return order, created


def accept(db: Session, caller: Caller, order_id: str) -> str:
    order, conversation = _get_order(db, order_id)
    ensure_conversation_consumer(caller, conversation)

    with unit_of_work(db):
        order = crud_order.get_for_update(db, order_id)
        if order.status == OrderStatus.ACCEPTED.value:
            raise Conflict(token="already_accepted", message="Order was already accepted.")
        lifecycle.transition_order(order, OrderStatus.ACCEPTED.value)
        market_request = crud_market_request.get_for_update(db, order.request_id)
        lifecycle.transition_request(
            db,
            market_request,
            RequestStatus.AUFTRAG_BESTAETIGT.value,
            changed_by=caller.user_id,
        )
        append_event(
            db,
            conversation=conversation,
            sender_user_id=caller.user_id,
            event=events.OrderAccepted(order_id=order.id),
        )
    return OrderStatus.ACCEPTED.value


def decline(db: Session, caller: Caller, order_id: str) -> str:
    order, conversation = _get_order(db, order_id)
    ensure_conversation_consumer(caller, conversation)

    with unit_of_work(db):
        order = crud_order.get_for_update(db, order_id)
        if order.status == OrderStatus.DECLINED.value:
            return OrderStatus.DECLINED.value
        if order.status == OrderStatus.ACCEPTED.value:
            raise Conflict(token="already_accepted", message="Order was already accepted.")
        if order.status == OrderStatus.CANCELED.value:
            raise Conflict(token="already_canceled", message="Order was already canceled.")

        lifecycle.transition_order(order, OrderStatus.DECLINED.value)
        market_request = crud_market_request.get_for_update(db, order.request_id)
        lifecycle.transition_request(
            db,
            market_request,
            RequestStatus.AUFTRAG_ABGELEHNT.value,
            changed_by=caller.user_id,
        )
        append_event(
            db,
            conversation=conversation,
            sender_user_id=caller.user_id,
            event=_money_event(events.OrderDeclined, order),
        )
    return OrderStatus.DECLINED.value


def cancel(db: Session, caller: Caller, order_id: str) -> str:
    """Consumer withdrawal within ORDER_WITHDRAWAL_DAYS of the order's creation."""
    order, conversation = _get_order(db, order_id)
    ensure_conversation_consumer(caller, conversation)

    with unit_of_work(db):
        order = crud_order.get_for_update(db, order_id)
        if order.status == OrderStatus.CANCELED.value:
            return OrderStatus.CANCELED.value
        if order.status == OrderStatus.DECLINED.value:
            raise Conflict(token="already_declined", message="Order was already declined.")
        if order.status == OrderStatus.ACCEPTED.value:
            raise Conflict(token="already_accepted", message="Order was already accepted.")

        age = utcnow() - as_utc(order.created_at)
        if age.days > settings.ORDER_WITHDRAWAL_DAYS:
            raise Forbidden(
                token="withdrawal_period_exceeded",
                message=f"Orders can only be withdrawn within {settings.ORDER_WITHDRAWAL_DAYS} days.",
                details={"days": age.days},
            )

        lifecycle.transition_order(order, OrderStatus.CANCELED.value)
        market_request = crud_market_request.get_for_update(db, order.request_id)
        lifecycle.transition_request(
            db,
            market_request,
            RequestStatus.AUFTRAG_STORNIERT.value,
            changed_by=caller.user_id,
        )
        append_event(
            db,
            conversation=conversation,
            sender_user_id=caller.user_id,
            event=_money_event(events.OrderCanceled, order),
        )
    return OrderStatus.CANCELED.value


def list_for_request(db: Session, caller: Caller, request_id: str) -> List[MarketOrder]:
    conversation = get_conversation(db, request_id)
    ensure_conversation_participant(caller, conversation)
    return crud_order.list_by_request(db, request_id)

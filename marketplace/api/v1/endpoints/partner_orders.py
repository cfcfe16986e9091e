# marketplace/api/v1/endpoints/partner_orders.py
from typing import List
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from marketplace.api import deps
from marketplace.core.permissions import Caller
from marketplace.db.session import get_db
from marketplace.schemas.order import OrderCreate, OrderCreated, OrderResponse
from marketplace.services import orders as order_service

router = APIRouter(prefix="/partners/orders", tags=["Partner Orders"])


@router.post("/create", response_model=OrderCreated, status_code=status.HTTP_201_CREATED)
def create_order(
    data: OrderCreate,
    response: Response,
    db: Session = Depends(get_db),
    caller: Caller = Depends(deps.get_caller),
):
    """
    Issue an order for the request. When an active order already exists it
    is returned with status 'order_exists' and nothing is written.
    """
    order, created = order_service.create(db, caller, data)
    if not created:
        response.status_code = status.HTTP_200_OK
        return {"order_id": order.id, "status": "order_exists"}
    return {"order_id": order.id, "status": order.status}


@router.get("/by-request", response_model=List[OrderResponse])
def list_orders_by_request(
    request_id: str = Query(...),
    db: Session = Depends(get_db),
    caller: Caller = Depends(deps.get_caller),
):
    return order_service.list_for_request(db, caller, request_id)

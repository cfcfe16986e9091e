# marketplace/schemas/order.py
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal

from marketplace.constants.market import DiscountType


class OrderCreate(BaseModel):
    request_id: str
    title: str = Field(..., min_length=1, max_length=500)
    net_total: Decimal = Field(..., ge=0)
    tax_rate: Decimal = Field(Decimal("0"), ge=0, le=100)
    discount_type: DiscountType = DiscountType.PERCENT
    discount_value: Decimal = Field(Decimal("0"), ge=0)
    discount_label: Optional[str] = None


class OrderResponse(BaseModel):
    id: str
    request_id: str
    title: str
    net_total: float
    tax_rate: float
    discount_type: str
    discount_value: float
    discount_label: Optional[str] = None
    gross_total: float
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}


class OrderCreated(BaseModel):
    order_id: str
    status: str


class OrderStatusResult(BaseModel):
    status: str

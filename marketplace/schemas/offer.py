from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal

from marketplace.constants.market import DiscountType


class OfferCreate(BaseModel):
    request_id: str
    title: str = Field(..., min_length=1, max_length=500)
    net_total: Decimal = Field(..., ge=0)
    tax_rate: Decimal = Field(Decimal("0"), ge=0, le=100)
    discount_type: DiscountType = DiscountType.PERCENT
    discount_value: Decimal = Field(Decimal("0"), ge=0)
    discount_label: Optional[str] = None


class OfferResponse(BaseModel):
    id: str
    request_id: str
    created_by_user_id: str
    title: str
    net_total: float
    tax_rate: float
    discount_type: str
    discount_value: float
    discount_label: Optional[str] = None
    gross_total: float
    status: str
    signature_id: str
    created_at: datetime

    model_config = {"from_attributes": True}


class OfferCreated(BaseModel):
    offer_id: str
    signature_id: str


class OfferStatusResult(BaseModel):
    status: str

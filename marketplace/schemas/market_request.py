# marketplace/schemas/market_request.py
from pydantic import BaseModel, Field, model_validator
from typing import Optional, List, Dict, Any
from datetime import datetime
from decimal import Decimal

from marketplace.constants.market import Execution, RequestStatus


class MarketRequestCreate(BaseModel):
    request_text: str = Field(..., max_length=30000)
    summary: Optional[str] = Field(None, max_length=500)
    branch: str = "Allgemein"
    category: str = "Sonstiges"
    city: Optional[str] = None
    zip: Optional[str] = None
    urgency: Optional[str] = None
    execution: Execution = Execution.DIGITAL
    budget_min: Optional[Decimal] = Field(None, ge=0)
    budget_max: Optional[Decimal] = Field(None, ge=0)

    @model_validator(mode="after")
    def validate_budget(self):
        if self.budget_min is not None and self.budget_max is not None:
            if self.budget_min > self.budget_max:
                raise ValueError("budget_min must be <= budget_max")
        return self


class MarketRequestUpdate(BaseModel):
    summary: Optional[str] = Field(None, max_length=500)
    request_text: Optional[str] = Field(None, max_length=30000)
    city: Optional[str] = None
    zip: Optional[str] = None
    urgency: Optional[str] = None
    execution: Optional[Execution] = None
    budget_min: Optional[Decimal] = Field(None, ge=0)
    budget_max: Optional[Decimal] = Field(None, ge=0)


class MarketRequestStatusChange(BaseModel):
    status: RequestStatus
    note: Optional[str] = None


class ProblemReport(BaseModel):
    note: str = ""


class MarketRequestResponse(BaseModel):
    id: str
    user_id: str
    title: str
    summary: Optional[str] = None
    request_text: str
    branch: str
    category: str
    city: Optional[str] = None
    zip: Optional[str] = None
    urgency: Optional[str] = None
    execution: str
    budget_min: Optional[float] = None
    budget_max: Optional[float] = None
    status: str
    extras: Dict[str, Any] = {}
    applications_count: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class MarketRequestListItem(BaseModel):
    id: str
    title: str
    status: str
    category: str
    city: Optional[str] = None
    applications_count: int
    created_at: datetime

    model_config = {"from_attributes": True}


class StatusHistoryEntry(BaseModel):
    id: str
    request_id: str
    old_status: Optional[str] = None
    new_status: str
    note: Optional[str] = None
    changed_by: str
    created_at: datetime

    model_config = {"from_attributes": True}


class MarketRequestCreated(BaseModel):
    id: str
    title: str


class MarketRequestList(BaseModel):
    requests: List[MarketRequestListItem]

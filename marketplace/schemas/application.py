# marketplace/schemas/application.py
from pydantic import BaseModel, Field
from typing import Optional, List, Literal
from datetime import datetime


class ApplicationCreate(BaseModel):
    request_id: str
    partner_id: str
    message_text: Optional[str] = Field(None, max_length=20000)


class ApplicationDecision(BaseModel):
    action: Literal["accept", "decline"]
    request_id: str


class ApplicationResponse(BaseModel):
    id: str
    request_id: str
    partner_id: str
    status: str
    message_text: Optional[str] = None
    message_html: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ApplicationCreated(BaseModel):
    id: str


class ApplicationDecisionResult(BaseModel):
    application_id: str
    status: str
    request_status: str
    conversation_id: Optional[str] = None
    declined_application_ids: List[str] = []

# marketplace/schemas/appointment.py
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from marketplace.constants.market import AppointmentKind


class AppointmentCreate(BaseModel):
    kind: AppointmentKind = AppointmentKind.VOR_ORT
    start_at: datetime
    duration_min: int = Field(60, ge=5, le=24 * 60)
    title: Optional[str] = Field(None, max_length=200)
    note: Optional[str] = None
    location: Optional[str] = None
    video_url: Optional[str] = None
    phone_customer: Optional[str] = None
    phone_partner: Optional[str] = None


class AppointmentResponse(BaseModel):
    id: str
    request_id: str
    created_by_user_id: str
    kind: str
    start_at: datetime
    duration_min: int
    title: Optional[str] = None
    note: Optional[str] = None
    location: Optional[str] = None
    video_url: Optional[str] = None
    phone_customer: Optional[str] = None
    phone_partner: Optional[str] = None
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}


class AppointmentCreated(BaseModel):
    appointment_id: str

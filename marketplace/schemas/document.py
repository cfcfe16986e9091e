# marketplace/schemas/document.py
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from marketplace.constants.market import InvoiceStatus


class DocumentRegister(BaseModel):
    path: str = Field(..., min_length=1, max_length=1024)
    name: Optional[str] = Field(None, max_length=255)
    size: Optional[int] = Field(None, ge=0)
    content_type: Optional[str] = None
    category: Optional[str] = None


class InvoiceStatusChange(BaseModel):
    status: InvoiceStatus


class DocumentResponse(BaseModel):
    id: str
    conversation_id: str
    request_id: str
    uploaded_by_user_id: str
    path: str
    name: Optional[str] = None
    size: Optional[int] = None
    content_type: Optional[str] = None
    category: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}

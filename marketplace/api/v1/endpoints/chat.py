# marketplace/api/v1/endpoints/chat.py
"""Conversation endpoints shared by consumer and partner."""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from marketplace.api import deps
from marketplace.core.config import settings
from marketplace.core.limiter import limiter
from marketplace.core.permissions import Caller
from marketplace.db.session import get_db
from marketplace.schemas.appointment import AppointmentCreate, AppointmentCreated, AppointmentResponse
from marketplace.schemas.document import DocumentRegister, DocumentResponse, InvoiceStatusChange
from marketplace.schemas.personal_data import PersonalDataResponse
from marketplace.schemas.message import (
    ConversationSummary,
    MessageCreate,
    MessagePage,
    MessageResponse,
)
from marketplace.services import appointments as appointment_service
from marketplace.services import chat as chat_service
from marketplace.services import documents as document_service
from marketplace.services import personal_data as personal_data_service
from marketplace.services import ratings as rating_service

router = APIRouter(prefix="/chat", tags=["Chat"])


@router.get("/conversations", response_model=List[ConversationSummary])
def list_conversations(
    db: Session = Depends(get_db),
    caller: Caller = Depends(deps.get_caller),
):
    conversations = chat_service.list_conversations(db, caller)
    return [
        {
            "id": c.id,
            "request_id": c.request_id,
            "request_title": c.request.title,
            "request_status": c.request.status,
            "partner_id": c.partner_id,
            "consumer_user_id": c.consumer_user_id,
            "last_message_at": c.last_message_at,
            "created_at": c.created_at,
        }
        for c in conversations
    ]


@router.post("/documents/{documentId}/invoice-status")
def change_invoice_status(
    documentId: str,
    data: InvoiceStatusChange,
    db: Session = Depends(get_db),
    caller: Caller = Depends(deps.get_caller),
):
    category = document_service.set_invoice_status(db, caller, documentId, data.status)
    return {"ok": True, "category": category}


@router.post("/documents/{documentId}/delete")
def delete_document(
    documentId: str,
    db: Session = Depends(get_db),
    caller: Caller = Depends(deps.get_caller),
):
    document_service.delete(db, caller, documentId)
    return {"ok": True}


@router.get("/{requestId}/messages", response_model=MessagePage)
def read_messages(
    requestId: str,
    after: Optional[str] = Query(default=None, description="Cursor returned by the previous page"),
    limit: Optional[int] = Query(default=None, ge=1, le=200),
    db: Session = Depends(get_db),
    caller: Caller = Depends(deps.get_caller),
):
    conversation, messages, next_cursor = chat_service.read_messages(
        db, caller, requestId, after=after, limit=limit
    )
    return {
        "conversation_id": conversation.id,
        "messages": messages,
        "next_cursor": next_cursor,
    }


@router.post(
    "/{requestId}/messages",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(settings.MESSAGE_RATE_LIMIT)
def post_message(
    request: Request,
    requestId: str,
    data: MessageCreate,
    db: Session = Depends(get_db),
    caller: Caller = Depends(deps.get_caller),
):
    return chat_service.post_message(db, caller, requestId, data.body)


@router.post(
    "/{requestId}/appointment/create",
    response_model=AppointmentCreated,
    status_code=status.HTTP_201_CREATED,
)
def create_appointment(
    requestId: str,
    data: AppointmentCreate,
    db: Session = Depends(get_db),
    caller: Caller = Depends(deps.get_caller),
):
    """Partner proposes an appointment; the request moves to 'Termin angelegt'."""
    appointment = appointment_service.propose(db, caller, requestId, data)
    return {"appointment_id": appointment.id}


@router.get("/{requestId}/appointments", response_model=List[AppointmentResponse])
def list_appointments(
    requestId: str,
    db: Session = Depends(get_db),
    caller: Caller = Depends(deps.get_caller),
):
    return appointment_service.list_for_request(db, caller, requestId)


@router.post("/{requestId}/rating/request")
def request_rating(
    requestId: str,
    db: Session = Depends(get_db),
    caller: Caller = Depends(deps.get_caller),
):
    rating_service.request_rating(db, caller, requestId)
    return {"ok": True}


@router.post(
    "/{requestId}/documents",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
)
def register_document(
    requestId: str,
    data: DocumentRegister,
    db: Session = Depends(get_db),
    caller: Caller = Depends(deps.get_caller),
):
    """Record an uploaded file's metadata on the conversation."""
    return document_service.register(db, caller, requestId, data)


@router.get("/{requestId}/personal-data", response_model=PersonalDataResponse)
def read_personal_data(
    requestId: str,
    db: Session = Depends(get_db),
    caller: Caller = Depends(deps.get_caller),
):
    return personal_data_service.view(db, caller, requestId)

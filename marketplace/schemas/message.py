# marketplace/schemas/message.py
"""
Typed ledger events.

Each event is a pydantic model tagged by ``kind``; ``MarketEvent`` is the
discriminated union over all of them and is what the ledger stores as the
message payload.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional, List, Literal, Union, Annotated

from pydantic import BaseModel, Field, TypeAdapter, field_serializer


class ChatText(BaseModel):
    kind: Literal["chat_text"] = "chat_text"
    body: str


class ApplicationAccepted(BaseModel):
    kind: Literal["application_accepted"] = "application_accepted"
    application_id: str
    partner_id: str


class AppointmentProposed(BaseModel):
    kind: Literal["appointment_proposed"] = "appointment_proposed"
    appointment_id: str
    start_at: datetime
    appointment_kind: Optional[str] = None
    title: Optional[str] = None


class AppointmentConfirmed(BaseModel):
    kind: Literal["appointment_confirmed"] = "appointment_confirmed"
    appointment_id: str


class AppointmentDeclined(BaseModel):
    kind: Literal["appointment_declined"] = "appointment_declined"
    appointment_id: str


class _OrderMoney(BaseModel):
    order_id: str
    title: str
    gross_total: Decimal

    @field_serializer("gross_total")
    def _serialize_gross(self, value: Decimal) -> str:
        return f"{value:.2f}"


class OrderCreated(_OrderMoney):
    kind: Literal["order_created"] = "order_created"


class OrderAccepted(BaseModel):
    kind: Literal["order_accepted"] = "order_accepted"
    order_id: str


class OrderDeclined(_OrderMoney):
    kind: Literal["order_declined"] = "order_declined"


class OrderCanceled(_OrderMoney):
    kind: Literal["order_canceled"] = "order_canceled"


class _OfferMoney(BaseModel):
    offer_id: str
    title: str
    gross_total: Decimal

    @field_serializer("gross_total")
    def _serialize_gross(self, value: Decimal) -> str:
        return f"{value:.2f}"


class OfferCreated(_OfferMoney):
    kind: Literal["offer_created"] = "offer_created"


class OfferAccepted(BaseModel):
    kind: Literal["offer_accepted"] = "offer_accepted"
    offer_id: str


class OfferDeclined(_OfferMoney):
    kind: Literal["offer_declined"] = "offer_declined"


class RatingRequested(BaseModel):
    kind: Literal["rating_requested"] = "rating_requested"
    request_id: str


class RatingSubmitted(BaseModel):
    kind: Literal["rating_submitted"] = "rating_submitted"
    request_id: str
    stars: int


class InvoiceStatusChanged(BaseModel):
    kind: Literal["invoice_status_changed"] = "invoice_status_changed"
    document_id: str
    status: str


class ProblemReported(BaseModel):
    kind: Literal["problem_reported"] = "problem_reported"
    note: str


class PersonalDataShared(BaseModel):
    kind: Literal["personal_data_shared"] = "personal_data_shared"


class PersonalDataDeleted(BaseModel):
    kind: Literal["personal_data_deleted"] = "personal_data_deleted"


MarketEvent = Annotated[
    Union[
        ChatText,
        ApplicationAccepted,
        AppointmentProposed,
        AppointmentConfirmed,
        AppointmentDeclined,
        OrderCreated,
        OrderAccepted,
        OrderDeclined,
        OrderCanceled,
        OfferCreated,
        OfferAccepted,
        OfferDeclined,
        RatingRequested,
        RatingSubmitted,
        InvoiceStatusChanged,
        ProblemReported,
        PersonalDataShared,
        PersonalDataDeleted,
    ],
    Field(discriminator="kind"),
]

event_adapter = TypeAdapter(MarketEvent)


# --- API models ---

class MessageCreate(BaseModel):
    body: str = Field(..., min_length=1, max_length=20000)


class MessageResponse(BaseModel):
    id: str
    conversation_id: str
    sender_user_id: str
    kind: str
    payload: Optional[dict] = None
    body_text: Optional[str] = None
    body_html: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class MessagePage(BaseModel):
    conversation_id: str
    messages: List[MessageResponse]
    next_cursor: Optional[str] = None


class ConversationSummary(BaseModel):
    id: str
    request_id: str
    request_title: str
    request_status: str
    partner_id: str
    consumer_user_id: str
    last_message_at: Optional[datetime] = None
    created_at: datetime

# marketplace/services/documents.py
"""
Chat document metadata.

The bytes live in object storage; this service only records where they are
and tracks the payment status of invoices through the document category.
"""
import logging

from sqlalchemy.orm import Session

from marketplace.constants.market import INVOICE_CATEGORY_PREFIX, InvoiceStatus
from marketplace.core.errors import Forbidden, NotFound, ValidationFailed
from marketplace.core.permissions import Caller, ensure_conversation_participant
from marketplace.crud import crud_document
from marketplace.db.session import unit_of_work
from marketplace.models.market_document import MarketDocument
from marketplace.schemas.document import DocumentRegister
from marketplace.schemas.message import InvoiceStatusChanged
from marketplace.services.chat import get_conversation
from marketplace.services.ledger import append_event

logger = logging.getLogger(__name__)


def is_invoice(document: MarketDocument) -> bool:
    category = document.category or ""
    return (
        category == INVOICE_CATEGORY_PREFIX
        or category.startswith(f"{INVOICE_CATEGORY_PREFIX}:")
        or (document.path or "").startswith(f"chat/{INVOICE_CATEGORY_PREFIX}/{document.request_id}/")
    )


def register(db: Session, caller: Caller, request_id: str, data: DocumentRegister) -> MarketDocument:
    conversation = get_conversation(db, request_id)
    ensure_conversation_participant(caller, conversation)

    with unit_of_work(db):
        document = crud_document.create(
            db, conversation=conversation, uploaded_by_user_id=caller.user_id, data=data
        )
    db.refresh(document)
    logger.info(f"Document {document.id} registered on conversation {conversation.id}")
    return document


def _get_own_document(db: Session, caller: Caller, document_id: str, action: str) -> MarketDocument:
    document = crud_document.get(db, document_id)
    if not document:
        raise NotFound(token="document_not_found", message="Document not found.")
    if document.uploaded_by_user_id != caller.user_id:
        raise Forbidden(message=f"Only the uploader may {action}.")
    return document


def set_invoice_status(db: Session, caller: Caller, document_id: str, status: InvoiceStatus) -> str:
    document = _get_own_document(db, caller, document_id, "change the invoice status")
    if not is_invoice(document):
        raise ValidationFailed(token="not_an_invoice", message="Document is not an invoice.")

    conversation = get_conversation(db, document.request_id)
    category = f"{INVOICE_CATEGORY_PREFIX}:{InvoiceStatus(status).value}"

    with unit_of_work(db):
        document.category = category
        append_event(
            db,
            conversation=conversation,
            sender_user_id=caller.user_id,
            event=InvoiceStatusChanged(document_id=document.id, status=InvoiceStatus(status).value),
        )
    logger.info(f"Invoice {document.id} set to {category}")
    return category


def delete(db: Session, caller: Caller, document_id: str) -> None:
    """Drop the document metadata; the stored bytes are left to the storage client."""
    document = _get_own_document(db, caller, document_id, "delete the document")
    path = document.path
    with unit_of_work(db):
        crud_document.remove(db, document=document)
    logger.info(f"Document {document_id} deleted by {caller.user_id} (path {path})")

# marketplace/crud/crud_document.py
from typing import Optional
from sqlalchemy.orm import Session

from marketplace.models.market_document import MarketDocument
from marketplace.models.market_conversation import MarketConversation
from marketplace.schemas.document import DocumentRegister


def create(
    db: Session,
    *,
    conversation: MarketConversation,
    uploaded_by_user_id: str,
    data: DocumentRegister,
) -> MarketDocument:
    db_obj = MarketDocument(
        **data.model_dump(),
        conversation_id=conversation.id,
        request_id=conversation.request_id,
        uploaded_by_user_id=uploaded_by_user_id,
    )
    db.add(db_obj)
    db.flush()
    return db_obj


def get(db: Session, document_id: str) -> Optional[MarketDocument]:
    return db.query(MarketDocument).filter(MarketDocument.id == document_id).first()


def remove(db: Session, *, document: MarketDocument) -> None:
    db.delete(document)
    db.flush()

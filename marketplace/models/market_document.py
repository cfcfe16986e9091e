# marketplace/models/market_document.py
# Metadata only; the bytes live in object storage.
import uuid
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey
from sqlalchemy.sql import func
from marketplace.db.base_class import Base
from marketplace.utils.time import utcnow


class MarketDocument(Base):
    __tablename__ = "market_documents"

    id = Column(String, primary_key=True, default=lambda: f"doc_{uuid.uuid4().hex[:12]}")
    conversation_id = Column(
        String,
        ForeignKey("market_conversations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    request_id = Column(
        String, ForeignKey("market_requests.id", ondelete="CASCADE"), nullable=False
    )
    uploaded_by_user_id = Column(String, nullable=False)
    path = Column(String, nullable=False)
    name = Column(String, nullable=True)
    size = Column(Integer, nullable=True)
    content_type = Column(String, nullable=True)
    category = Column(String, nullable=True)  # "angebot", "auftrag", "rechnung:<status>", ...

    created_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )

# marketplace/models/market_conversation.py
import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from marketplace.db.base_class import Base
from marketplace.utils.time import utcnow


class MarketConversation(Base):
    __tablename__ = "market_conversations"

    id = Column(String, primary_key=True, default=lambda: f"conv_{uuid.uuid4().hex[:12]}")
    request_id = Column(
        String,
        ForeignKey("market_requests.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    application_id = Column(
        String, ForeignKey("market_applications.id", ondelete="SET NULL"), nullable=True
    )
    partner_id = Column(
        String, ForeignKey("partners.id", ondelete="CASCADE"), nullable=False, index=True
    )
    consumer_user_id = Column(String, nullable=False, index=True)
    last_message_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )

    # Relationships
    request = relationship("MarketRequest", back_populates="conversation")
    partner = relationship("Partner")
    messages = relationship(
        "MarketMessage", back_populates="conversation", cascade="all, delete-orphan"
    )

# marketplace/models/market_message.py
import uuid
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from marketplace.db.base_class import Base, JSONType
from marketplace.utils.time import utcnow


class MarketMessage(Base):
    """
    One entry of a conversation ledger.

    Chat text and system events share this table. ``kind`` is the event tag
    and ``payload`` holds its structured fields; ``body_text``/``body_html``
    are the rendered presentation of the entry.
    """

    __tablename__ = "market_messages"

    id = Column(String, primary_key=True, default=lambda: f"msg_{uuid.uuid4().hex[:12]}")
    conversation_id = Column(
        String,
        ForeignKey("market_conversations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sender_user_id = Column(String, nullable=False)
    kind = Column(String(50), nullable=False, index=True)
    payload = Column(JSONType, nullable=True)
    body_text = Column(Text, nullable=True)
    body_html = Column(Text, nullable=True)

    created_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )

    # Relationships
    conversation = relationship("MarketConversation", back_populates="messages")

    __table_args__ = (
        Index("ix_market_messages_conversation_created", "conversation_id", "created_at", "id"),
    )

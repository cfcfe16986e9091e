# marketplace/models/market_request.py
import uuid
from sqlalchemy import Column, String, Text, Integer, Numeric, DateTime, Index, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from marketplace.db.base_class import Base, JSONType
from marketplace.utils.time import utcnow


class MarketRequest(Base):
    __tablename__ = "market_requests"

    id = Column(String, primary_key=True, default=lambda: f"req_{uuid.uuid4().hex[:12]}")
    user_id = Column(String, nullable=False, index=True)  # owning consumer

    summary = Column(String(500), nullable=True)
    request_text = Column(Text, nullable=False)
    branch = Column(String, nullable=False, server_default=text("'Allgemein'"))
    category = Column(String, nullable=False, server_default=text("'Sonstiges'"))
    city = Column(String, nullable=True)
    zip = Column(String, nullable=True)
    urgency = Column(String, nullable=True)
    execution = Column(String, nullable=False, server_default=text("'digital'"))  # vorOrt | digital
    budget_min = Column(Numeric(14, 2), nullable=True)
    budget_max = Column(Numeric(14, 2), nullable=True)

    # Status (see marketplace.constants.market.RequestStatus)
    status = Column(String, nullable=False, server_default=text("'Anfrage'"))

    # {"appointment_id": ..., "appointment_confirmed": bool}
    extras = Column(JSONType, nullable=False, default=dict)

    # Display counter, maintained in the application submit transaction
    applications_count = Column(Integer, nullable=False, default=0, server_default=text("0"))

    created_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )

    # Relationships
    applications = relationship(
        "MarketApplication", back_populates="request", cascade="all, delete-orphan"
    )
    conversation = relationship(
        "MarketConversation", back_populates="request", uselist=False,
        cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_market_requests_user_status", "user_id", "status"),
    )

    @property
    def title(self) -> str:
        if self.summary and self.summary.strip():
            return self.summary.strip()
        return " – ".join(p for p in (self.category, self.city) if p) or "Anfrage"

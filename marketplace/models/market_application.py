# marketplace/models/market_application.py
import uuid
from sqlalchemy import (
    Column, String, Text, DateTime, ForeignKey, UniqueConstraint, Index, text
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from marketplace.db.base_class import Base
from marketplace.utils.time import utcnow


class MarketApplication(Base):
    __tablename__ = "market_applications"

    id = Column(String, primary_key=True, default=lambda: f"app_{uuid.uuid4().hex[:12]}")
    request_id = Column(
        String, ForeignKey("market_requests.id", ondelete="CASCADE"), nullable=False, index=True
    )
    partner_id = Column(
        String, ForeignKey("partners.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status = Column(String, nullable=False, server_default=text("'submitted'"))
    message_text = Column(Text, nullable=True)
    message_html = Column(Text, nullable=True)

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
    request = relationship("MarketRequest", back_populates="applications")
    partner = relationship("Partner")

    __table_args__ = (
        UniqueConstraint("request_id", "partner_id", name="uq_market_application_request_partner"),
        # At most one accepted application per request.
        Index(
            "uq_market_applications_one_accepted",
            "request_id",
            unique=True,
            postgresql_where=text("status = 'accepted'"),
            sqlite_where=text("status = 'accepted'"),
        ),
    )

# marketplace/models/market_offer.py
import uuid
from sqlalchemy import Column, String, Numeric, DateTime, ForeignKey, text
from sqlalchemy.sql import func
from marketplace.db.base_class import Base
from marketplace.utils.time import utcnow


class MarketOffer(Base):
    """A priced quote the partner puts up for the consumer before any order."""

    __tablename__ = "market_offers"

    id = Column(String, primary_key=True, default=lambda: f"off_{uuid.uuid4().hex[:12]}")
    request_id = Column(
        String, ForeignKey("market_requests.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_by_user_id = Column(String, nullable=False)
    title = Column(String, nullable=False)

    # Money
    net_total = Column(Numeric(14, 2), nullable=False)
    tax_rate = Column(Numeric(5, 2), nullable=False, server_default=text("0"))
    discount_type = Column(String, nullable=False, server_default=text("'percent'"))
    discount_value = Column(Numeric(14, 2), nullable=False, server_default=text("0"))
    discount_label = Column(String, nullable=True)
    gross_total = Column(Numeric(14, 2), nullable=False)

    status = Column(String, nullable=False, server_default=text("'created'"))
    # Reference handed to the e-signature flow
    signature_id = Column(String, nullable=False, unique=True)

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

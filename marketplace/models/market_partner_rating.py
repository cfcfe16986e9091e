# marketplace/models/market_partner_rating.py
import uuid
from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from marketplace.db.base_class import Base
from marketplace.utils.time import utcnow


class MarketPartnerRating(Base):
    __tablename__ = "market_partner_ratings"

    id = Column(String, primary_key=True, default=lambda: f"rat_{uuid.uuid4().hex[:12]}")
    partner_id = Column(
        String, ForeignKey("partners.id", ondelete="CASCADE"), nullable=False, index=True
    )
    request_id = Column(
        String, ForeignKey("market_requests.id", ondelete="CASCADE"), nullable=False
    )
    consumer_user_id = Column(String, nullable=False)
    stars = Column(Integer, nullable=False)  # 0-10
    text = Column(Text, nullable=True)
    name = Column(String, nullable=True)

    created_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("request_id", "consumer_user_id", name="uq_market_rating_request_consumer"),
    )

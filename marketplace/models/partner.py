# marketplace/models/partner.py
import uuid
from sqlalchemy import Column, String, Integer, Numeric, DateTime, text
from sqlalchemy.sql import func
from marketplace.db.base_class import Base
from marketplace.utils.time import utcnow


class Partner(Base):
    """A service provider profile. Provisioned by the CRM side of the product."""

    __tablename__ = "partners"

    id = Column(String, primary_key=True, default=lambda: f"prt_{uuid.uuid4().hex[:12]}")
    owner_user_id = Column(String, nullable=False, index=True)
    display_name = Column(String, nullable=True)
    company_name = Column(String, nullable=True)

    # Aggregate over market_partner_ratings, recalculated on each new rating
    rating_avg = Column(Numeric(4, 2), nullable=True)
    rating_count = Column(Integer, nullable=False, default=0, server_default=text("0"))

    created_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )

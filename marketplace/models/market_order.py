# marketplace/models/market_order.py
import uuid
from sqlalchemy import Column, String, Numeric, DateTime, ForeignKey, text
from sqlalchemy.sql import func
from marketplace.db.base_class import Base
from marketplace.utils.time import utcnow


class MarketOrder(Base):
    __tablename__ = "market_orders"

    id = Column(String, primary_key=True, default=lambda: f"ord_{uuid.uuid4().hex[:12]}")
    request_id = Column(
        String, ForeignKey("market_requests.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title = Column(String, nullable=False)

    # Money
    net_total = Column(Numeric(14, 2), nullable=False)
    tax_rate = Column(Numeric(5, 2), nullable=False, server_default=text("0"))
    discount_type = Column(String, nullable=False, server_default=text("'percent'"))  # percent | fixed
    discount_value = Column(Numeric(14, 2), nullable=False, server_default=text("0"))
    discount_label = Column(String, nullable=True)
    gross_total = Column(Numeric(14, 2), nullable=False)

    status = Column(String, nullable=False, server_default=text("'created'"))

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

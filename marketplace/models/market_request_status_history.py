# marketplace/models/market_request_status_history.py
"""
Audit trail for request status changes.
Every transition, including problem reports and admin overrides, lands here.
"""
import uuid
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Index, text
from sqlalchemy.sql import func
from marketplace.db.base_class import Base
from marketplace.utils.time import utcnow


class MarketRequestStatusHistory(Base):
    __tablename__ = "market_request_status_history"

    id = Column(String, primary_key=True, default=lambda: f"rsh_{uuid.uuid4().hex[:12]}")
    request_id = Column(
        String, ForeignKey("market_requests.id", ondelete="CASCADE"), nullable=False
    )
    old_status = Column(String(50), nullable=True)
    new_status = Column(String(50), nullable=False)
    note = Column(Text, nullable=True)
    changed_by = Column(String, nullable=False)

    created_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now()
    )

    __table_args__ = (
        Index("idx_request_history_created", "request_id", text("created_at DESC")),
    )

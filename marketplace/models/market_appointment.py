# marketplace/models/market_appointment.py
import uuid
from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey, text
from sqlalchemy.sql import func
from marketplace.db.base_class import Base
from marketplace.utils.time import utcnow


class MarketAppointment(Base):
    __tablename__ = "market_appointments"

    id = Column(String, primary_key=True, default=lambda: f"appt_{uuid.uuid4().hex[:12]}")
    request_id = Column(
        String, ForeignKey("market_requests.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_by_user_id = Column(String, nullable=False)
    kind = Column(String, nullable=False, server_default=text("'vor_ort'"))  # vor_ort | video | telefon
    start_at = Column(DateTime(timezone=True), nullable=False)
    duration_min = Column(Integer, nullable=False, server_default=text("60"))
    title = Column(String, nullable=True)
    note = Column(Text, nullable=True)
    location = Column(String, nullable=True)
    video_url = Column(String, nullable=True)
    phone_customer = Column(String, nullable=True)
    phone_partner = Column(String, nullable=True)

    status = Column(String, nullable=False, server_default=text("'proposed'"))

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

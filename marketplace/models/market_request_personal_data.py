# marketplace/models/market_request_personal_data.py
import uuid
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, text
from sqlalchemy.sql import func
from marketplace.db.base_class import Base
from marketplace.utils.time import utcnow


class MarketRequestPersonalData(Base):
    """Billing and execution address the consumer shares with the engaged partner."""

    __tablename__ = "market_request_personal_data"

    id = Column(String, primary_key=True, default=lambda: f"pd_{uuid.uuid4().hex[:12]}")
    request_id = Column(
        String,
        ForeignKey("market_requests.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    user_id = Column(String, nullable=False, index=True)

    # Billing
    bill_first_name = Column(String, nullable=True)
    bill_last_name = Column(String, nullable=True)
    bill_company = Column(String, nullable=True)
    bill_street = Column(String, nullable=True)
    bill_house_number = Column(String, nullable=True)
    bill_postal_code = Column(String, nullable=True)
    bill_city = Column(String, nullable=True)
    bill_phone = Column(String, nullable=True)
    bill_email = Column(String, nullable=True)

    # Execution address
    exec_same_as_billing = Column(Boolean, nullable=False, default=False, server_default=text("false"))
    exec_street = Column(String, nullable=True)
    exec_house_number = Column(String, nullable=True)
    exec_postal_code = Column(String, nullable=True)
    exec_city = Column(String, nullable=True)

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

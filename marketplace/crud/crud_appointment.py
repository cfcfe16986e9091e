# marketplace/crud/crud_appointment.py
from typing import Optional, List
from sqlalchemy.orm import Session

from marketplace.constants.market import AppointmentStatus
from marketplace.core.retry import retry_read
from marketplace.models.market_appointment import MarketAppointment
from marketplace.schemas.appointment import AppointmentCreate


def create(
    db: Session, *, request_id: str, created_by_user_id: str, data: AppointmentCreate
) -> MarketAppointment:
    obj_data = data.model_dump()
    obj_data["kind"] = data.kind.value
    db_obj = MarketAppointment(
        **obj_data,
        request_id=request_id,
        created_by_user_id=created_by_user_id,
        status=AppointmentStatus.PROPOSED.value,
    )
    db.add(db_obj)
    db.flush()
    return db_obj


def get(db: Session, appointment_id: str) -> Optional[MarketAppointment]:
    return db.query(MarketAppointment).filter(MarketAppointment.id == appointment_id).first()


@retry_read
def list_by_request(db: Session, request_id: str) -> List[MarketAppointment]:
    return (
        db.query(MarketAppointment)
        .filter(MarketAppointment.request_id == request_id)
        .order_by(MarketAppointment.start_at.asc())
        .all()
    )


def get_for_update(db: Session, appointment_id: str) -> Optional[MarketAppointment]:
    return (
        db.query(MarketAppointment)
        .filter(MarketAppointment.id == appointment_id)
        .with_for_update()
        .populate_existing()
        .first()
    )

# marketplace/crud/crud_personal_data.py
from typing import Optional
from sqlalchemy.orm import Session

from marketplace.core.retry import retry_read
from marketplace.models.market_request_personal_data import MarketRequestPersonalData
from marketplace.schemas.personal_data import PersonalDataShare

_EXEC_FROM_BILLING = {
    "exec_street": "bill_street",
    "exec_house_number": "bill_house_number",
    "exec_postal_code": "bill_postal_code",
    "exec_city": "bill_city",
}


@retry_read
def get_by_request(db: Session, request_id: str) -> Optional[MarketRequestPersonalData]:
    return (
        db.query(MarketRequestPersonalData)
        .filter(MarketRequestPersonalData.request_id == request_id)
        .first()
    )


def upsert(
    db: Session, *, request_id: str, user_id: str, data: PersonalDataShare
) -> MarketRequestPersonalData:
    """Every share replaces the whole record; fields left out are cleared."""
    values = data.model_dump()
    if data.exec_same_as_billing:
        for exec_field, bill_field in _EXEC_FROM_BILLING.items():
            values[exec_field] = values[bill_field]

    db_obj = (
        db.query(MarketRequestPersonalData)
        .filter(MarketRequestPersonalData.request_id == request_id)
        .first()
    )
    if db_obj is None:
        db_obj = MarketRequestPersonalData(request_id=request_id, user_id=user_id)
        db.add(db_obj)
    for field, value in values.items():
        setattr(db_obj, field, value)
    db_obj.user_id = user_id
    db.flush()
    return db_obj


def delete_for_request(db: Session, *, request_id: str, user_id: str) -> int:
    deleted = (
        db.query(MarketRequestPersonalData)
        .filter(
            MarketRequestPersonalData.request_id == request_id,
            MarketRequestPersonalData.user_id == user_id,
        )
        .delete(synchronize_session="fetch")
    )
    db.flush()
    return deleted

# marketplace/crud/crud_market_request.py
from typing import Optional, List
from sqlalchemy.orm import Session

from marketplace.constants.market import OPEN_REQUEST_STATUSES, RequestStatus
from marketplace.core.retry import retry_read
from marketplace.models.market_request import MarketRequest
from marketplace.schemas.market_request import MarketRequestCreate, MarketRequestUpdate


def create(db: Session, *, user_id: str, data: MarketRequestCreate) -> MarketRequest:
    obj_data = data.model_dump()
    obj_data["execution"] = data.execution.value
    db_obj = MarketRequest(
        **obj_data,
        user_id=user_id,
        status=RequestStatus.ANFRAGE.value,
        extras={},
        applications_count=0,
    )
    db.add(db_obj)
    db.flush()
    return db_obj


@retry_read
def get(db: Session, request_id: str) -> Optional[MarketRequest]:
    return db.query(MarketRequest).filter(MarketRequest.id == request_id).first()


def get_for_update(db: Session, request_id: str) -> Optional[MarketRequest]:
    """
    Fetch the request row under SELECT ... FOR UPDATE.

    ``populate_existing`` overwrites an instance already in the identity map
    with the locked row, so status checks never see a pre-lock value.
    """
    return (
        db.query(MarketRequest)
        .filter(MarketRequest.id == request_id)
        .with_for_update()
        .populate_existing()
        .first()
    )


@retry_read
def list_by_user(db: Session, user_id: str, include_deleted: bool = False) -> List[MarketRequest]:
    query = db.query(MarketRequest).filter(MarketRequest.user_id == user_id)
    if not include_deleted:
        query = query.filter(MarketRequest.status != RequestStatus.GELOESCHT.value)
    return query.order_by(MarketRequest.created_at.desc()).all()


@retry_read
def list_open(db: Session, limit: int = 100) -> List[MarketRequest]:
    return (
        db.query(MarketRequest)
        .filter(MarketRequest.status.in_(OPEN_REQUEST_STATUSES))
        .order_by(MarketRequest.created_at.desc())
        .limit(limit)
        .all()
    )


def update(db: Session, *, market_request: MarketRequest, data: MarketRequestUpdate) -> MarketRequest:
    update_data = data.model_dump(exclude_unset=True)
    if update_data.get("execution") is not None:
        update_data["execution"] = data.execution.value
    for field, value in update_data.items():
        setattr(market_request, field, value)
    db.flush()
    return market_request


def set_extras(db: Session, *, market_request: MarketRequest, **values) -> MarketRequest:
    # Reassign so the JSON column is marked dirty.
    extras = dict(market_request.extras or {})
    extras.update(values)
    market_request.extras = extras
    db.flush()
    return market_request


def increment_applications(db: Session, *, market_request: MarketRequest) -> None:
    market_request.applications_count = MarketRequest.applications_count + 1
    db.flush()
    db.refresh(market_request, attribute_names=["applications_count"])

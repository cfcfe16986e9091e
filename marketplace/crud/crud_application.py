# marketplace/crud/crud_application.py
from typing import Optional, List, Iterable
from sqlalchemy.orm import Session, joinedload

from marketplace.constants.market import ApplicationStatus
from marketplace.core.retry import retry_read
from marketplace.models.market_application import MarketApplication


def create(
    db: Session,
    *,
    request_id: str,
    partner_id: str,
    message_text: Optional[str] = None,
    message_html: Optional[str] = None,
) -> MarketApplication:
    db_obj = MarketApplication(
        request_id=request_id,
        partner_id=partner_id,
        status=ApplicationStatus.SUBMITTED.value,
        message_text=message_text,
        message_html=message_html,
    )
    db.add(db_obj)
    db.flush()
    return db_obj


@retry_read
def get(db: Session, application_id: str) -> Optional[MarketApplication]:
    return (
        db.query(MarketApplication)
        .options(joinedload(MarketApplication.request))
        .filter(MarketApplication.id == application_id)
        .first()
    )


def get_by_request_partner(db: Session, request_id: str, partner_id: str) -> Optional[MarketApplication]:
    return (
        db.query(MarketApplication)
        .filter(
            MarketApplication.request_id == request_id,
            MarketApplication.partner_id == partner_id,
        )
        .first()
    )


def get_for_update(db: Session, application_id: str) -> Optional[MarketApplication]:
    return (
        db.query(MarketApplication)
        .filter(MarketApplication.id == application_id)
        .with_for_update()
        .populate_existing()
        .first()
    )


def get_accepted(db: Session, request_id: str) -> Optional[MarketApplication]:
    return (
        db.query(MarketApplication)
        .filter(
            MarketApplication.request_id == request_id,
            MarketApplication.status == ApplicationStatus.ACCEPTED.value,
        )
        .first()
    )


@retry_read
def list_by_request(db: Session, request_id: str) -> List[MarketApplication]:
    return (
        db.query(MarketApplication)
        .filter(MarketApplication.request_id == request_id)
        .order_by(MarketApplication.created_at.asc())
        .all()
    )


@retry_read
def list_by_partners(db: Session, partner_ids: Iterable[str]) -> List[MarketApplication]:
    partner_ids = list(partner_ids)
    if not partner_ids:
        return []
    return (
        db.query(MarketApplication)
        .filter(MarketApplication.partner_id.in_(partner_ids))
        .order_by(MarketApplication.created_at.desc())
        .all()
    )


def compare_and_set_status(
    db: Session, *, application_id: str, expected: str, new_status: str
) -> bool:
    """
    Move an application from ``expected`` to ``new_status`` in one UPDATE.
    Returns False when the row was no longer in ``expected``.
    """
    updated = (
        db.query(MarketApplication)
        .filter(
            MarketApplication.id == application_id,
            MarketApplication.status == expected,
        )
        .update({MarketApplication.status: new_status}, synchronize_session="fetch")
    )
    db.flush()
    return updated == 1


def decline_siblings(db: Session, *, request_id: str, accepted_id: str) -> List[str]:
    """Decline every other submitted application of the request. Returns their ids."""
    siblings = (
        db.query(MarketApplication)
        .filter(
            MarketApplication.request_id == request_id,
            MarketApplication.id != accepted_id,
            MarketApplication.status == ApplicationStatus.SUBMITTED.value,
        )
        .all()
    )
    for sibling in siblings:
        sibling.status = ApplicationStatus.DECLINED.value
    db.flush()
    return [s.id for s in siblings]

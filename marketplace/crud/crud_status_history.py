# marketplace/crud/crud_status_history.py
from typing import Optional, List
from sqlalchemy.orm import Session

from marketplace.core.retry import retry_read
from marketplace.models.market_request_status_history import MarketRequestStatusHistory


def record(
    db: Session,
    *,
    request_id: str,
    old_status: Optional[str],
    new_status: str,
    changed_by: str,
    note: Optional[str] = None,
) -> MarketRequestStatusHistory:
    entry = MarketRequestStatusHistory(
        request_id=request_id,
        old_status=old_status,
        new_status=new_status,
        changed_by=changed_by,
        note=note,
    )
    db.add(entry)
    db.flush()
    return entry


@retry_read
def list_by_request(db: Session, request_id: str) -> List[MarketRequestStatusHistory]:
    return (
        db.query(MarketRequestStatusHistory)
        .filter(MarketRequestStatusHistory.request_id == request_id)
        .order_by(MarketRequestStatusHistory.created_at.asc())
        .all()
    )

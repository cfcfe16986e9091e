# marketplace/crud/crud_message.py
import base64
from datetime import datetime
from typing import Optional, Iterator, List, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import and_, or_

from marketplace.core.errors import ValidationFailed
from marketplace.core.retry import retry_read
from marketplace.models.market_conversation import MarketConversation
from marketplace.models.market_message import MarketMessage
from marketplace.utils.time import as_utc, utcnow


def append(
    db: Session,
    *,
    conversation: MarketConversation,
    sender_user_id: str,
    kind: str,
    payload: dict,
    body_text: str,
    body_html: str,
) -> MarketMessage:
    now = utcnow()
    message = MarketMessage(
        conversation_id=conversation.id,
        sender_user_id=sender_user_id,
        kind=kind,
        payload=payload,
        body_text=body_text,
        body_html=body_html,
        created_at=now,
    )
    db.add(message)
    conversation.last_message_at = now
    db.flush()
    return message


# --- Keyset cursor over (created_at, id) ---

def encode_cursor(message: MarketMessage) -> str:
    raw = f"{message.created_at.isoformat()}|{message.id}".encode()
    return base64.urlsafe_b64encode(raw).decode()


def decode_cursor(cursor: str) -> Tuple[datetime, str]:
    try:
        raw = base64.urlsafe_b64decode(cursor.encode()).decode()
        created_at, message_id = raw.split("|", 1)
        return as_utc(datetime.fromisoformat(created_at)), message_id
    except ValueError:
        raise ValidationFailed(token="invalid_cursor", message="Cursor is malformed.")


@retry_read
def _fetch_batch(
    db: Session,
    conversation_id: str,
    after: Optional[Tuple[datetime, str]],
    batch_size: int,
) -> List[MarketMessage]:
    query = db.query(MarketMessage).filter(MarketMessage.conversation_id == conversation_id)
    if after is not None:
        created_at, message_id = after
        query = query.filter(
            or_(
                MarketMessage.created_at > created_at,
                and_(MarketMessage.created_at == created_at, MarketMessage.id > message_id),
            )
        )
    return (
        query.order_by(MarketMessage.created_at.asc(), MarketMessage.id.asc())
        .limit(batch_size)
        .all()
    )


class MessageLog:
    """
    Lazily consumed view of a conversation's ledger.

    Every ``iter()`` starts a fresh pass from ``after``, fetching rows in
    keyset-ordered batches, so the log can be walked any number of times.
    """

    def __init__(
        self,
        db: Session,
        conversation_id: str,
        after: Optional[str] = None,
        batch_size: int = 100,
    ):
        self.db = db
        self.conversation_id = conversation_id
        self.after = decode_cursor(after) if after else None
        self.batch_size = batch_size

    def __iter__(self) -> Iterator[MarketMessage]:
        position = self.after
        while True:
            batch = _fetch_batch(self.db, self.conversation_id, position, self.batch_size)
            yield from batch
            if len(batch) < self.batch_size:
                return
            last = batch[-1]
            position = (last.created_at, last.id)

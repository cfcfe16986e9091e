# marketplace/services/chat.py
import itertools
import logging
from typing import Optional, List, Tuple

from sqlalchemy.orm import Session

from marketplace.core.config import settings
from marketplace.core.errors import NotFound
from marketplace.core.permissions import Caller, ensure_conversation_participant
from marketplace.crud import crud_conversation, crud_message
from marketplace.db.session import unit_of_work
from marketplace.models.market_conversation import MarketConversation
from marketplace.models.market_message import MarketMessage
from marketplace.schemas.message import ChatText
from marketplace.services.ledger import append_event

logger = logging.getLogger(__name__)


def get_conversation(db: Session, request_id: str) -> MarketConversation:
    conversation = crud_conversation.get_by_request(db, request_id)
    if not conversation:
        raise NotFound(token="conversation_not_found", message="No conversation for this request.")
    return conversation


def list_conversations(db: Session, caller: Caller) -> List[MarketConversation]:
    return crud_conversation.list_for_user(db, caller.user_id, caller.partner_ids)


def read_messages(
    db: Session,
    caller: Caller,
    request_id: str,
    after: Optional[str] = None,
    limit: Optional[int] = None,
) -> Tuple[MarketConversation, List[MarketMessage], Optional[str]]:
    """One page of the ledger plus the cursor to resume from."""
    conversation = get_conversation(db, request_id)
    ensure_conversation_participant(caller, conversation)

    limit = limit or settings.MESSAGE_PAGE_SIZE
    log = crud_message.MessageLog(db, conversation.id, after=after, batch_size=limit)
    # Read one past the page to know whether another page exists.
    rows = list(itertools.islice(log, limit + 1))
    page = rows[:limit]
    next_cursor = crud_message.encode_cursor(page[-1]) if len(rows) > limit else None
    return conversation, page, next_cursor


def post_message(db: Session, caller: Caller, request_id: str, body: str) -> MarketMessage:
    conversation = get_conversation(db, request_id)
    ensure_conversation_participant(caller, conversation)

    with unit_of_work(db):
        message = append_event(
            db,
            conversation=conversation,
            sender_user_id=caller.user_id,
            event=ChatText(body=body.strip()),
        )
    db.refresh(message)
    logger.info(f"Message {message.id} posted to conversation {conversation.id}")
    return message

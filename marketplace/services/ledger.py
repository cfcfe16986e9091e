# marketplace/services/ledger.py
"""Single writer for conversation ledger entries."""
from sqlalchemy.orm import Session

from marketplace.crud import crud_message
from marketplace.models.market_conversation import MarketConversation
from marketplace.models.market_message import MarketMessage
from marketplace.utils.event_rendering import render


def append_event(
    db: Session, *, conversation: MarketConversation, sender_user_id: str, event
) -> MarketMessage:
    body_text, body_html = render(event)
    return crud_message.append(
        db,
        conversation=conversation,
        sender_user_id=sender_user_id,
        kind=event.kind,
        payload=event.model_dump(mode="json"),
        body_text=body_text,
        body_html=body_html,
    )

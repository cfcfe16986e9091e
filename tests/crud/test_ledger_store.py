"""
Store-level guarantees checked against the SQLite test database.
"""
from datetime import timedelta

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from marketplace.core.errors import ValidationFailed
from marketplace.crud import crud_conversation, crud_message
from marketplace.crud.crud_message import MessageLog
from marketplace.models.market_application import MarketApplication
from marketplace.models.market_message import MarketMessage
from marketplace.utils.time import utcnow
from tests.utils.market import OTHER_OWNER_ID, create_market_request, create_partner


def test_second_accepted_application_violates_index(db: Session) -> None:
    market_request = create_market_request(db)
    partner_p = create_partner(db)
    partner_q = create_partner(db, owner_user_id=OTHER_OWNER_ID)

    db.add(MarketApplication(request_id=market_request.id, partner_id=partner_p.id, status="accepted"))
    db.commit()
    db.add(MarketApplication(request_id=market_request.id, partner_id=partner_q.id, status="accepted"))

    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_declined_applications_are_not_limited(db: Session) -> None:
    market_request = create_market_request(db)
    partner_p = create_partner(db)
    partner_q = create_partner(db, owner_user_id=OTHER_OWNER_ID)

    db.add(MarketApplication(request_id=market_request.id, partner_id=partner_p.id, status="declined"))
    db.add(MarketApplication(request_id=market_request.id, partner_id=partner_q.id, status="declined"))
    db.commit()

    assert db.query(MarketApplication).count() == 2


def _conversation_with_messages(db: Session, count: int):
    market_request = create_market_request(db)
    partner = create_partner(db)
    conversation = crud_conversation.get_or_create(
        db,
        request_id=market_request.id,
        partner_id=partner.id,
        consumer_user_id=market_request.user_id,
    )
    start = utcnow()
    for i in range(count):
        db.add(
            MarketMessage(
                conversation_id=conversation.id,
                sender_user_id=market_request.user_id,
                kind="chat_text",
                payload={"kind": "chat_text", "body": f"m{i}"},
                body_text=f"m{i}",
                body_html=f"m{i}",
                created_at=start + timedelta(seconds=i),
            )
        )
    db.commit()
    return conversation


def test_message_log_can_be_walked_twice(db: Session) -> None:
    conversation = _conversation_with_messages(db, 7)
    log = MessageLog(db, conversation.id, batch_size=3)

    first = [m.body_text for m in log]
    second = [m.body_text for m in log]

    assert first == [f"m{i}" for i in range(7)]
    assert second == first


def test_message_log_resumes_after_cursor(db: Session) -> None:
    conversation = _conversation_with_messages(db, 5)
    messages = list(MessageLog(db, conversation.id))

    cursor = crud_message.encode_cursor(messages[1])
    rest = [m.body_text for m in MessageLog(db, conversation.id, after=cursor, batch_size=2)]

    assert rest == ["m2", "m3", "m4"]


def test_malformed_cursor():
    with pytest.raises(ValidationFailed) as exc_info:
        crud_message.decode_cursor("bm9wZQ==")  # "nope"
    assert exc_info.value.token == "invalid_cursor"

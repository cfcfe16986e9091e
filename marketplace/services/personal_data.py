# marketplace/services/personal_data.py
"""
Billing and execution address the consumer shares with the engaged partner.

Only the consumer writes or deletes the record; both participants of the
conversation may read it. Each change is announced in the chat when a
conversation exists.
"""
import logging

from sqlalchemy.orm import Session

from marketplace.core.errors import NotFound
from marketplace.core.permissions import (
    Caller,
    ensure_conversation_participant,
    ensure_request_consumer,
)
from marketplace.crud import crud_conversation, crud_personal_data
from marketplace.db.session import unit_of_work
from marketplace.models.market_request_personal_data import MarketRequestPersonalData
from marketplace.schemas.message import PersonalDataDeleted, PersonalDataShared
from marketplace.schemas.personal_data import PersonalDataShare
from marketplace.services.chat import get_conversation
from marketplace.services.ledger import append_event
from marketplace.services.requests import get_request

logger = logging.getLogger(__name__)


def share(
    db: Session, caller: Caller, request_id: str, data: PersonalDataShare
) -> MarketRequestPersonalData:
    market_request = get_request(db, request_id)
    ensure_request_consumer(caller, market_request)
    conversation = crud_conversation.get_by_request(db, request_id)

    with unit_of_work(db):
        record = crud_personal_data.upsert(
            db, request_id=request_id, user_id=caller.user_id, data=data
        )
        if conversation:
            append_event(
                db,
                conversation=conversation,
                sender_user_id=caller.user_id,
                event=PersonalDataShared(),
            )
    db.refresh(record)
    logger.info(f"Personal data shared on request {request_id}")
    return record


def delete(db: Session, caller: Caller, request_id: str) -> int:
    market_request = get_request(db, request_id)
    ensure_request_consumer(caller, market_request)
    conversation = crud_conversation.get_by_request(db, request_id)

    with unit_of_work(db):
        deleted = crud_personal_data.delete_for_request(
            db, request_id=request_id, user_id=caller.user_id
        )
        if conversation:
            append_event(
                db,
                conversation=conversation,
                sender_user_id=caller.user_id,
                event=PersonalDataDeleted(),
            )
    logger.info(f"Personal data deleted on request {request_id} ({deleted} row(s))")
    return deleted


def view(db: Session, caller: Caller, request_id: str) -> MarketRequestPersonalData:
    conversation = get_conversation(db, request_id)
    ensure_conversation_participant(caller, conversation)
    record = crud_personal_data.get_by_request(db, request_id)
    if not record:
        raise NotFound(token="personal_data_not_found", message="No personal data shared yet.")
    return record

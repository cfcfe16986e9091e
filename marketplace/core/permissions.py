# marketplace/core/permissions.py
"""
Capability checks.

Every mutating endpoint resolves a fresh ``Caller`` from the bearer token and
asks exactly one of these functions whether the caller may act on the entity
at hand. Nothing here is cached between calls.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet

from marketplace.core.errors import Forbidden
from marketplace.models.market_conversation import MarketConversation
from marketplace.models.market_request import MarketRequest

logger = logging.getLogger(__name__)


class CallerRole(str, Enum):
    ADMIN = "admin"
    PARTNER_OWNER = "partner_owner"
    CONSUMER = "consumer"


@dataclass(frozen=True)
class Caller:
    user_id: str
    role: CallerRole
    partner_ids: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def is_admin(self) -> bool:
        return self.role == CallerRole.ADMIN

    def owns_partner(self, partner_id: str) -> bool:
        return partner_id in self.partner_ids


def _deny(caller: Caller, what: str, entity_id: str) -> Forbidden:
    logger.warning(f"User {caller.user_id} denied: {what} on {entity_id}")
    return Forbidden(message=f"Not allowed: {what}.")


def ensure_request_owner(caller: Caller, market_request: MarketRequest) -> None:
    """Owner of the request, or admin."""
    if caller.is_admin or market_request.user_id == caller.user_id:
        return
    raise _deny(caller, "request owner required", market_request.id)


def ensure_request_consumer(caller: Caller, market_request: MarketRequest) -> None:
    # The consumer's own data: admins do not act on their behalf.
    if market_request.user_id == caller.user_id:
        return
    raise _deny(caller, "request owner required", market_request.id)


def ensure_partner_owner(caller: Caller, partner_id: str) -> None:
    if caller.owns_partner(partner_id):
        return
    raise _deny(caller, "partner owner required", partner_id)


def ensure_conversation_consumer(caller: Caller, conversation: MarketConversation) -> None:
    # Consumer-only actions (confirm, accept, rate) are not open to admins.
    if conversation.consumer_user_id == caller.user_id:
        return
    raise _deny(caller, "consumer of this conversation required", conversation.id)


def ensure_conversation_partner(caller: Caller, conversation: MarketConversation) -> None:
    """Owner of the conversation's partner, or admin."""
    if caller.is_admin or caller.owns_partner(conversation.partner_id):
        return
    raise _deny(caller, "partner of this conversation required", conversation.id)


def ensure_conversation_participant(caller: Caller, conversation: MarketConversation) -> None:
    if (
        caller.is_admin
        or conversation.consumer_user_id == caller.user_id
        or caller.owns_partner(conversation.partner_id)
    ):
        return
    raise _deny(caller, "participant of this conversation required", conversation.id)

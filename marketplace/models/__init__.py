# marketplace/models/__init__.py
# Importing every model here registers it on Base.metadata (Alembic and the
# test suite rely on that).

from .partner import Partner
from .market_request import MarketRequest
from .market_application import MarketApplication
from .market_conversation import MarketConversation
from .market_message import MarketMessage
from .market_appointment import MarketAppointment
from .market_order import MarketOrder
from .market_partner_rating import MarketPartnerRating
from .market_request_status_history import MarketRequestStatusHistory
from .market_document import MarketDocument
from .market_offer import MarketOffer
from .market_request_personal_data import MarketRequestPersonalData

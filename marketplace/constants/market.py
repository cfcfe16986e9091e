# marketplace/constants/market.py
"""
Closed status vocabularies for the marketplace entities.

Request statuses keep the German labels the frontend displays; every other
entity uses lower-case English tokens.
"""
from enum import Enum


class RequestStatus(str, Enum):
    ANFRAGE = "Anfrage"
    AKTIV = "Aktiv"
    TERMIN_ANGELEGT = "Termin angelegt"
    TERMIN_BESTAETIGT = "Termin bestätigt"
    AUFTRAG_ERSTELLT = "Auftrag erstellt"
    AUFTRAG_BESTAETIGT = "Auftrag bestätigt"
    AUFTRAG_ABGELEHNT = "Auftrag abgelehnt"
    AUFTRAG_STORNIERT = "Auftrag storniert"
    ANGEBOT_ERSTELLT = "Angebot erstellt"
    ANGEBOT_ANGENOMMEN = "Angebot angenommen"
    ANGEBOT_ABGELEHNT = "Angebot abgelehnt"
    ABGESCHLOSSEN = "Abgeschlossen"
    PROBLEM = "Problem"
    GELOESCHT = "Gelöscht"


class ApplicationStatus(str, Enum):
    SUBMITTED = "submitted"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class AppointmentStatus(str, Enum):
    PROPOSED = "proposed"
    CONFIRMED = "confirmed"
    DECLINED = "declined"


class AppointmentKind(str, Enum):
    VOR_ORT = "vor_ort"
    VIDEO = "video"
    TELEFON = "telefon"


class OrderStatus(str, Enum):
    CREATED = "created"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    CANCELED = "canceled"


class OfferStatus(str, Enum):
    CREATED = "created"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class DiscountType(str, Enum):
    PERCENT = "percent"
    FIXED = "fixed"


class Execution(str, Enum):
    VOR_ORT = "vorOrt"
    DIGITAL = "digital"


class InvoiceStatus(str, Enum):
    ERSTELLT = "erstellt"
    BEZAHLT = "bezahlt"
    VERZUG = "verzug"


class MessageKind(str, Enum):
    """Tag of a conversation ledger entry."""
    CHAT_TEXT = "chat_text"
    APPLICATION_ACCEPTED = "application_accepted"
    APPOINTMENT_PROPOSED = "appointment_proposed"
    APPOINTMENT_CONFIRMED = "appointment_confirmed"
    APPOINTMENT_DECLINED = "appointment_declined"
    ORDER_CREATED = "order_created"
    ORDER_ACCEPTED = "order_accepted"
    ORDER_DECLINED = "order_declined"
    ORDER_CANCELED = "order_canceled"
    OFFER_CREATED = "offer_created"
    OFFER_ACCEPTED = "offer_accepted"
    OFFER_DECLINED = "offer_declined"
    PERSONAL_DATA_SHARED = "personal_data_shared"
    PERSONAL_DATA_DELETED = "personal_data_deleted"
    RATING_REQUESTED = "rating_requested"
    RATING_SUBMITTED = "rating_submitted"
    INVOICE_STATUS_CHANGED = "invoice_status_changed"
    PROBLEM_REPORTED = "problem_reported"


# Orders in these states block creating another order for the same request.
ACTIVE_ORDER_STATUSES = {OrderStatus.CREATED.value, OrderStatus.ACCEPTED.value}

# Requests partners may still apply to.
OPEN_REQUEST_STATUSES = {RequestStatus.ANFRAGE.value}

INVOICE_CATEGORY_PREFIX = "rechnung"

# marketplace/utils/event_rendering.py
"""
Presentation of ledger events.

Events are stored as structured payloads; the German chat text and the HTML
card shown in the conversation timeline are produced here, never parsed back.
"""
import html
from decimal import Decimal
from typing import Tuple

from marketplace.schemas import message as events

_CARD = (
    '<div style="border:1px solid {border};background:{background};'
    'border-radius:14px;padding:12px">'
    '<div style="font-size:14px;font-weight:600;color:{color};margin-bottom:4px">{heading}</div>'
    '<div style="font-size:12px;color:{color}">{body}</div>'
    "</div>"
)

_NEUTRAL = {"border": "#e2e8f0", "background": "#f8fafc", "color": "#0f172a"}
_POSITIVE = {"border": "#bbf7d0", "background": "#f0fdf4", "color": "#166534"}
_NEGATIVE = {"border": "#fee2e2", "background": "#fef2f2", "color": "#991b1b"}


def format_money(value) -> str:
    return f"{Decimal(str(value)):.2f} €"


def text_to_html(text: str) -> str:
    """Escape plain chat text and keep its line breaks."""
    return html.escape(text).replace("\n", "<br>")


def _card(heading: str, body: str, palette: dict) -> str:
    return _CARD.format(heading=html.escape(heading), body=html.escape(body), **palette)


def render(event) -> Tuple[str, str]:
    """Return ``(body_text, body_html)`` for a ledger event."""
    if isinstance(event, events.ChatText):
        return event.body, text_to_html(event.body)

    if isinstance(event, events.ApplicationAccepted):
        text = "Bewerbung angenommen. Der Chat ist jetzt freigeschaltet."
        return text, _card("Bewerbung angenommen", text, _POSITIVE)

    if isinstance(event, events.AppointmentProposed):
        when = event.start_at.strftime("%d.%m.%Y %H:%M")
        label = event.title or "Termin"
        text = f"Terminvorschlag: {label} am {when}"
        return text, _card("Terminvorschlag", text, _NEUTRAL)

    if isinstance(event, events.AppointmentConfirmed):
        text = "Termin bestätigt."
        return text, _card("Termin bestätigt", text, _POSITIVE)

    if isinstance(event, events.AppointmentDeclined):
        text = "Termin abgelehnt."
        return text, _card("Termin abgelehnt", text, _NEGATIVE)

    if isinstance(event, events.OrderCreated):
        text = f"Auftrag erstellt: {event.title} • Brutto: {format_money(event.gross_total)}"
        return text, _card("Neuer Auftrag", text, _NEUTRAL)

    if isinstance(event, events.OrderAccepted):
        text = "Auftrag bestätigt."
        return text, _card("Auftrag bestätigt", text, _POSITIVE)

    if isinstance(event, events.OrderDeclined):
        text = f"Auftrag abgelehnt: {event.title} • Brutto: {format_money(event.gross_total)}"
        return text, _card("Auftrag abgelehnt", text, _NEGATIVE)

    if isinstance(event, events.OrderCanceled):
        text = (
            f"Auftrag storniert (Widerruf): {event.title} • "
            f"Brutto: {format_money(event.gross_total)}"
        )
        return text, _card("Auftrag storniert", text, _NEGATIVE)

    if isinstance(event, events.OfferCreated):
        text = f"Angebot erstellt: {event.title} • Brutto: {format_money(event.gross_total)}"
        return text, _card("Angebot erstellt", text, _NEUTRAL)

    if isinstance(event, events.OfferAccepted):
        text = "Angebot angenommen."
        return text, _card("Angebot angenommen", text, _POSITIVE)

    if isinstance(event, events.OfferDeclined):
        text = f"Angebot abgelehnt: {event.title} • Brutto: {format_money(event.gross_total)}"
        return text, _card("Angebot abgelehnt", text, _NEGATIVE)

    if isinstance(event, events.RatingRequested):
        text = "Der Partner bittet um eine Bewertung."
        return text, _card("Bewertung anfragen", text, _NEUTRAL)

    if isinstance(event, events.RatingSubmitted):
        text = f"Neue Bewertung erhalten: {event.stars} Sterne"
        return text, _card("Bewertung erhalten", text, _POSITIVE)

    if isinstance(event, events.InvoiceStatusChanged):
        text = f"Rechnungsstatus geändert: {event.status}"
        return text, _card("Rechnung", text, _NEUTRAL)

    if isinstance(event, events.ProblemReported):
        text = f"Problem gemeldet: {event.note}"
        return text, _card("Problem gemeldet", text, _NEGATIVE)

    if isinstance(event, events.PersonalDataShared):
        text = "Personen- und Adressdaten wurden bereitgestellt."
        return text, _card("Persönliche Daten", text, _NEUTRAL)

    if isinstance(event, events.PersonalDataDeleted):
        text = "Personen- und Adressdaten wurden gelöscht."
        return text, _card("Persönliche Daten", text, _NEUTRAL)

    raise TypeError(f"Unknown event type: {type(event).__name__}")

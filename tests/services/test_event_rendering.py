from datetime import datetime, timezone
from decimal import Decimal

import pytest

from marketplace.schemas import message as events
from marketplace.utils.event_rendering import render, text_to_html


def test_order_declined_text():
    text, html = render(
        events.OrderDeclined(order_id="ord_1", title="Dach <neu>", gross_total=Decimal("1190"))
    )

    assert text == "Auftrag abgelehnt: Dach <neu> • Brutto: 1190.00 €"
    assert "Dach &lt;neu&gt;" in html
    assert "<neu>" not in html


def test_offer_created_text():
    text, html = render(
        events.OfferCreated(offer_id="off_1", title="Fassade", gross_total=Decimal("595"))
    )

    assert text == "Angebot erstellt: Fassade • Brutto: 595.00 €"
    assert "Angebot erstellt" in html


def test_appointment_proposed_text():
    start_at = datetime(2030, 5, 17, 9, 30, tzinfo=timezone.utc)

    text, _ = render(
        events.AppointmentProposed(appointment_id="appt_1", start_at=start_at, title="Besichtigung")
    )

    assert text == "Terminvorschlag: Besichtigung am 17.05.2030 09:30"


def test_chat_text_is_escaped():
    text, html = render(events.ChatText(body="a & b\n<script>"))

    assert text == "a & b\n<script>"
    assert html == "a &amp; b<br>&lt;script&gt;"


def test_text_to_html_keeps_line_breaks():
    assert text_to_html("eins\nzwei") == "eins<br>zwei"


@pytest.mark.parametrize(
    "payload",
    [
        {"kind": "rating_submitted", "request_id": "req_1", "stars": 7},
        {"kind": "invoice_status_changed", "document_id": "doc_1", "status": "verzug"},
        {"kind": "order_created", "order_id": "ord_1", "title": "X", "gross_total": "10.00"},
    ],
)
def test_stored_payload_round_trips_to_its_event(payload):
    event = events.event_adapter.validate_python(payload)

    assert event.kind == payload["kind"]
    assert event.model_dump(mode="json") == payload


def test_unknown_kind_is_rejected():
    with pytest.raises(ValueError):
        events.event_adapter.validate_python({"kind": "chat_marker", "body": "x"})

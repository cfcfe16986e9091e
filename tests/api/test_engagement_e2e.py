# tests/api/test_engagement_e2e.py
"""
Full engagement walk-through: request, two applications, accept, appointment,
order and its decline, checked against the database after every step.
"""
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from marketplace.models.market_application import MarketApplication
from marketplace.models.market_appointment import MarketAppointment
from marketplace.models.market_conversation import MarketConversation
from marketplace.models.market_order import MarketOrder
from marketplace.models.market_request import MarketRequest
from marketplace.models.market_request_status_history import MarketRequestStatusHistory
from tests.utils.market import (
    CONSUMER_ID,
    OTHER_OWNER_ID,
    PARTNER_OWNER_ID,
    REQUEST_TEXT,
    apply,
    create_order,
    create_partner,
    decide,
    headers,
    propose_appointment,
)


def test_engagement_lifecycle(client: TestClient, db: Session) -> None:
    partner_p = create_partner(db, owner_user_id=PARTNER_OWNER_ID, display_name="P")
    partner_q = create_partner(db, owner_user_id=OTHER_OWNER_ID, display_name="Q")
    consumer = headers(CONSUMER_ID)

    # Consumer creates request R
    created = client.post(
        "/api/v1/requests",
        headers=consumer,
        json={"request_text": REQUEST_TEXT, "summary": "Büro renovieren", "execution": "vorOrt"},
    )
    assert created.status_code == 201
    request_id = created.json()["id"]

    # P and Q apply
    app_1 = apply(client, request_id, partner_p).json()["id"]
    app_2 = apply(client, request_id, partner_q).json()["id"]
    db.expire_all()
    assert db.get(MarketApplication, app_1).status == "submitted"
    assert db.get(MarketApplication, app_2).status == "submitted"
    assert db.get(MarketRequest, request_id).applications_count == 2

    # Consumer accepts A1
    accepted = decide(client, app_1, request_id)
    assert accepted.status_code == 200
    db.expire_all()
    assert db.get(MarketApplication, app_1).status == "accepted"
    assert db.get(MarketApplication, app_2).status == "declined"
    conversation = db.query(MarketConversation).filter_by(request_id=request_id).one()
    assert conversation.partner_id == partner_p.id

    # P proposes an appointment
    appointment_id = propose_appointment(client, request_id).json()["appointment_id"]
    db.expire_all()
    assert db.get(MarketRequest, request_id).status == "Termin angelegt"

    # Consumer confirms
    confirmed = client.post(
        f"/api/v1/konsument/chat/{request_id}/appointment/{appointment_id}/confirm",
        headers=consumer,
    )
    assert confirmed.status_code == 200
    db.expire_all()
    assert db.get(MarketRequest, request_id).status == "Termin bestätigt"
    assert db.get(MarketAppointment, appointment_id).status == "confirmed"

    # P issues order O; consumer declines it
    order_id = create_order(client, request_id).json()["order_id"]
    declined = client.post(f"/api/v1/konsument/orders/{order_id}/decline", headers=consumer)
    assert declined.json() == {"status": "declined"}
    db.expire_all()
    assert db.get(MarketOrder, order_id).status == "declined"
    assert db.get(MarketRequest, request_id).status == "Auftrag abgelehnt"

    # Every request transition is on record, in order
    history = (
        db.query(MarketRequestStatusHistory)
        .filter_by(request_id=request_id)
        .order_by(MarketRequestStatusHistory.created_at)
        .all()
    )
    assert [h.new_status for h in history] == [
        "Aktiv",
        "Termin angelegt",
        "Termin bestätigt",
        "Auftrag erstellt",
        "Auftrag abgelehnt",
    ]

    # The ledger tells the same story
    messages = client.get(f"/api/v1/chat/{request_id}/messages", headers=consumer).json()
    assert [m["kind"] for m in messages["messages"]] == [
        "application_accepted",
        "appointment_proposed",
        "appointment_confirmed",
        "order_created",
        "order_declined",
    ]

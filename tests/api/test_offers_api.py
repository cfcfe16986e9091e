from decimal import Decimal

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from marketplace.models.market_message import MarketMessage
from marketplace.models.market_offer import MarketOffer
from marketplace.models.market_request import MarketRequest
from tests.utils.market import (
    CONSUMER_ID,
    OTHER_OWNER_ID,
    create_offer,
    create_partner,
    engage,
    headers,
)


def _answer(client: TestClient, offer_id: str, action: str, user_id: str = CONSUMER_ID):
    return client.post(f"/api/v1/konsument/offers/{offer_id}/{action}", headers=headers(user_id))


def _kinds(db: Session):
    return [
        m.kind
        for m in db.query(MarketMessage).order_by(MarketMessage.created_at, MarketMessage.id)
    ]


def test_create_offer(client: TestClient, db: Session) -> None:
    ctx = engage(client, db)

    response = create_offer(client, ctx["request_id"])

    assert response.status_code == 201
    content = response.json()
    assert content["signature_id"].startswith("offer_")
    db.expire_all()
    offer = db.get(MarketOffer, content["offer_id"])
    assert offer.status == "created"
    assert offer.gross_total == Decimal("595.00")
    assert db.get(MarketRequest, ctx["request_id"]).status == "Angebot erstellt"
    event = db.query(MarketMessage).filter_by(kind="offer_created").one()
    assert event.payload["gross_total"] == "595.00"
    assert event.body_text == "Angebot erstellt: Angebot Renovierung • Brutto: 595.00 €"


def test_second_open_offer_is_rejected(client: TestClient, db: Session) -> None:
    ctx = engage(client, db)
    first = create_offer(client, ctx["request_id"]).json()["offer_id"]

    response = create_offer(client, ctx["request_id"], title="Zweites Angebot")

    assert response.status_code == 409
    assert response.json()["error"] == "offer_pending"
    assert db.query(MarketOffer).count() == 1
    assert db.query(MarketOffer).one().id == first


def test_foreign_partner_cannot_create_offer(client: TestClient, db: Session) -> None:
    ctx = engage(client, db)
    create_partner(db, owner_user_id=OTHER_OWNER_ID)

    response = create_offer(client, ctx["request_id"], user_id=OTHER_OWNER_ID)

    assert response.status_code == 403
    assert db.query(MarketOffer).count() == 0


def test_accept_offer_is_idempotent(client: TestClient, db: Session) -> None:
    ctx = engage(client, db)
    offer_id = create_offer(client, ctx["request_id"]).json()["offer_id"]

    response = _answer(client, offer_id, "accept")
    repeat = _answer(client, offer_id, "accept")

    assert response.status_code == 200
    assert response.json() == {"status": "accepted"}
    assert repeat.json() == {"status": "accepted"}
    db.expire_all()
    assert db.get(MarketOffer, offer_id).status == "accepted"
    assert db.get(MarketRequest, ctx["request_id"]).status == "Angebot angenommen"
    assert _kinds(db).count("offer_accepted") == 1


def test_decline_offer_then_offer_again(client: TestClient, db: Session) -> None:
    ctx = engage(client, db)
    offer_id = create_offer(client, ctx["request_id"]).json()["offer_id"]

    response = _answer(client, offer_id, "decline")
    repeat = _answer(client, offer_id, "decline")
    accept_after = _answer(client, offer_id, "accept")
    next_offer = create_offer(client, ctx["request_id"], title="Neues Angebot")

    assert response.json() == {"status": "declined"}
    assert repeat.json() == {"status": "declined"}
    assert accept_after.status_code == 409
    assert accept_after.json()["error"] == "already_declined"
    assert next_offer.status_code == 201
    db.expire_all()
    assert db.get(MarketRequest, ctx["request_id"]).status == "Angebot erstellt"
    assert _kinds(db).count("offer_declined") == 1


def test_accepted_offer_can_still_be_declined(client: TestClient, db: Session) -> None:
    ctx = engage(client, db)
    offer_id = create_offer(client, ctx["request_id"]).json()["offer_id"]
    _answer(client, offer_id, "accept")

    response = _answer(client, offer_id, "decline")

    assert response.json() == {"status": "declined"}
    db.expire_all()
    assert db.get(MarketRequest, ctx["request_id"]).status == "Angebot abgelehnt"
    declined = db.query(MarketMessage).filter_by(kind="offer_declined").one()
    assert declined.body_text == "Angebot abgelehnt: Angebot Renovierung • Brutto: 595.00 €"


def test_only_consumer_answers_offer(client: TestClient, db: Session) -> None:
    ctx = engage(client, db)
    offer_id = create_offer(client, ctx["request_id"]).json()["offer_id"]

    by_partner = _answer(client, offer_id, "accept", user_id=ctx["partner"].owner_user_id)
    unknown = _answer(client, "off_missing", "accept")

    assert by_partner.status_code == 403
    assert unknown.status_code == 404
    assert unknown.json()["error"] == "offer_not_found"
    db.expire_all()
    assert db.get(MarketOffer, offer_id).status == "created"


def test_list_offers_by_request(client: TestClient, db: Session) -> None:
    ctx = engage(client, db)
    offer_id = create_offer(client, ctx["request_id"]).json()["offer_id"]

    mine = client.get(
        "/api/v1/partners/offers/by-request",
        headers=headers(ctx["partner"].owner_user_id),
        params={"request_id": ctx["request_id"]},
    )
    outsider = client.get(
        "/api/v1/partners/offers/by-request",
        headers=headers(OTHER_OWNER_ID),
        params={"request_id": ctx["request_id"]},
    )

    assert [o["id"] for o in mine.json()] == [offer_id]
    assert mine.json()[0]["status"] == "created"
    assert outsider.status_code == 403

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from marketplace.crud import crud_application
from marketplace.models.market_application import MarketApplication
from marketplace.models.market_conversation import MarketConversation
from marketplace.models.market_message import MarketMessage
from marketplace.models.market_request import MarketRequest
from tests.utils.market import (
    ADMIN_ID,
    CONSUMER_ID,
    OTHER_OWNER_ID,
    PARTNER_OWNER_ID,
    apply,
    create_market_request,
    create_partner,
    decide,
    headers,
)


def test_submit_application(client: TestClient, db: Session) -> None:
    partner = create_partner(db)
    market_request = create_market_request(db)

    response = apply(client, market_request.id, partner)

    assert response.status_code == 201
    application_id = response.json()["id"]
    assert application_id.startswith("app_")

    db.expire_all()
    application = db.get(MarketApplication, application_id)
    assert application.status == "submitted"
    assert application.message_html == "Wir helfen gern."
    assert db.get(MarketRequest, market_request.id).applications_count == 1


def test_application_html_is_always_derived_from_text(client: TestClient, db: Session) -> None:
    partner = create_partner(db)
    market_request = create_market_request(db)

    response = client.post(
        "/api/v1/applications",
        headers=headers(PARTNER_OWNER_ID),
        json={
            "request_id": market_request.id,
            "partner_id": partner.id,
            "message_text": "<b>Gern</b>\nab Montag",
            "message_html": "<script>alert(1)</script>",
        },
    )

    assert response.status_code == 201
    db.expire_all()
    application = db.get(MarketApplication, response.json()["id"])
    assert application.message_html == "&lt;b&gt;Gern&lt;/b&gt;<br>ab Montag"


def test_submit_application_twice_conflicts(client: TestClient, db: Session) -> None:
    partner = create_partner(db)
    market_request = create_market_request(db)
    apply(client, market_request.id, partner)

    response = apply(client, market_request.id, partner)

    assert response.status_code == 409
    assert response.json()["error"] == "already_applied"
    db.expire_all()
    assert db.get(MarketRequest, market_request.id).applications_count == 1


def test_submit_application_for_foreign_partner_is_forbidden(client: TestClient, db: Session) -> None:
    partner = create_partner(db)
    create_partner(db, owner_user_id=OTHER_OWNER_ID)
    market_request = create_market_request(db)

    response = client.post(
        "/api/v1/applications",
        headers=headers(OTHER_OWNER_ID),
        json={"request_id": market_request.id, "partner_id": partner.id},
    )

    assert response.status_code == 403
    assert db.query(MarketApplication).count() == 0


def test_submit_application_to_closed_request(client: TestClient, db: Session) -> None:
    partner = create_partner(db)
    market_request = create_market_request(db, status="Aktiv")

    response = apply(client, market_request.id, partner)

    assert response.status_code == 409
    assert response.json()["error"] == "request_closed"


def test_submit_application_unknown_partner(client: TestClient, db: Session) -> None:
    market_request = create_market_request(db)

    response = client.post(
        "/api/v1/applications",
        headers=headers(PARTNER_OWNER_ID),
        json={"request_id": market_request.id, "partner_id": "prt_missing"},
    )

    assert response.status_code == 404
    assert response.json()["error"] == "partner_not_found"


def test_accept_declines_siblings_and_opens_conversation(client: TestClient, db: Session) -> None:
    partner_p = create_partner(db)
    partner_q = create_partner(db, owner_user_id=OTHER_OWNER_ID)
    market_request = create_market_request(db)
    app_p = apply(client, market_request.id, partner_p).json()["id"]
    app_q = apply(client, market_request.id, partner_q).json()["id"]

    response = decide(client, app_p, market_request.id)

    assert response.status_code == 200
    content = response.json()
    assert content["status"] == "accepted"
    assert content["request_status"] == "Aktiv"
    assert content["declined_application_ids"] == [app_q]

    db.expire_all()
    assert db.get(MarketApplication, app_p).status == "accepted"
    assert db.get(MarketApplication, app_q).status == "declined"
    assert db.get(MarketRequest, market_request.id).status == "Aktiv"

    conversation = db.query(MarketConversation).filter_by(request_id=market_request.id).one()
    assert conversation.id == content["conversation_id"]
    assert conversation.partner_id == partner_p.id
    assert conversation.consumer_user_id == CONSUMER_ID

    events = db.query(MarketMessage).filter_by(conversation_id=conversation.id).all()
    assert [e.kind for e in events] == ["application_accepted"]
    assert events[0].payload == {
        "kind": "application_accepted",
        "application_id": app_p,
        "partner_id": partner_p.id,
    }


def test_second_accept_is_rejected(client: TestClient, db: Session) -> None:
    partner_p = create_partner(db)
    partner_q = create_partner(db, owner_user_id=OTHER_OWNER_ID)
    market_request = create_market_request(db)
    app_p = apply(client, market_request.id, partner_p).json()["id"]
    app_q = apply(client, market_request.id, partner_q).json()["id"]
    decide(client, app_p, market_request.id)

    response = decide(client, app_q, market_request.id)

    assert response.status_code == 409
    assert response.json()["error"] == "already_accepted"
    db.expire_all()
    accepted = db.query(MarketApplication).filter_by(
        request_id=market_request.id, status="accepted"
    ).all()
    assert [a.id for a in accepted] == [app_p]


def test_lost_accept_race_is_rejected_by_the_database(client: TestClient, db: Session, monkeypatch) -> None:
    """
    Replays the view of a transaction that read the request before the
    winning accept committed: the guard query sees nothing and the sibling is
    still submitted. The partial unique index must still reject it.
    """
    partner_p = create_partner(db)
    partner_q = create_partner(db, owner_user_id=OTHER_OWNER_ID)
    market_request = create_market_request(db)
    app_p = apply(client, market_request.id, partner_p).json()["id"]
    app_q = apply(client, market_request.id, partner_q).json()["id"]
    decide(client, app_p, market_request.id)

    db.expire_all()
    db.get(MarketApplication, app_q).status = "submitted"
    db.get(MarketRequest, market_request.id).status = "Anfrage"
    db.commit()
    monkeypatch.setattr(crud_application, "get_accepted", lambda db, request_id: None)

    response = decide(client, app_q, market_request.id)

    assert response.status_code == 409
    assert response.json()["error"] == "already_accepted"
    db.expire_all()
    accepted = db.query(MarketApplication).filter_by(
        request_id=market_request.id, status="accepted"
    ).all()
    assert [a.id for a in accepted] == [app_p]


def test_decline_application(client: TestClient, db: Session) -> None:
    partner = create_partner(db)
    market_request = create_market_request(db)
    application_id = apply(client, market_request.id, partner).json()["id"]

    response = decide(client, application_id, market_request.id, action="decline")
    repeat = decide(client, application_id, market_request.id, action="decline")

    assert response.status_code == 200
    assert response.json()["status"] == "declined"
    assert response.json()["request_status"] == "Anfrage"
    assert repeat.status_code == 409
    assert repeat.json()["error"] == "invalid_transition"


def test_decision_by_stranger_is_forbidden(client: TestClient, db: Session) -> None:
    partner = create_partner(db)
    market_request = create_market_request(db)
    application_id = apply(client, market_request.id, partner).json()["id"]

    response = decide(client, application_id, market_request.id, user_id="nobody")

    assert response.status_code == 403
    db.expire_all()
    assert db.get(MarketApplication, application_id).status == "submitted"


def test_admin_can_accept(client: TestClient, db: Session) -> None:
    partner = create_partner(db)
    market_request = create_market_request(db)
    application_id = apply(client, market_request.id, partner).json()["id"]

    response = client.post(
        f"/api/v1/applications/{application_id}/decision",
        headers=headers(ADMIN_ID, role="admin"),
        json={"action": "accept", "request_id": market_request.id},
    )

    assert response.status_code == 200
    assert response.json()["status"] == "accepted"


def test_decision_with_mismatched_request(client: TestClient, db: Session) -> None:
    partner = create_partner(db)
    market_request = create_market_request(db)
    other_request = create_market_request(db)
    application_id = apply(client, market_request.id, partner).json()["id"]

    response = decide(client, application_id, other_request.id)

    assert response.status_code == 400
    assert response.json()["error"] == "request_mismatch"


def test_list_applications(client: TestClient, db: Session) -> None:
    partner_p = create_partner(db)
    partner_q = create_partner(db, owner_user_id=OTHER_OWNER_ID)
    market_request = create_market_request(db)
    app_p = apply(client, market_request.id, partner_p).json()["id"]
    apply(client, market_request.id, partner_q)

    for_request = client.get(
        f"/api/v1/requests/{market_request.id}/applications", headers=headers(CONSUMER_ID)
    )
    mine = client.get("/api/v1/applications/mine", headers=headers(PARTNER_OWNER_ID))
    single = client.get(f"/api/v1/applications/{app_p}", headers=headers(PARTNER_OWNER_ID))
    foreign = client.get(f"/api/v1/applications/{app_p}", headers=headers(OTHER_OWNER_ID))

    assert len(for_request.json()) == 2
    assert [a["id"] for a in mine.json()] == [app_p]
    assert single.json()["partner_id"] == partner_p.id
    assert foreign.status_code == 403

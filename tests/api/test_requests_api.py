from decimal import Decimal

from fastapi.testclient import TestClient
from sqlalchemy import update
from sqlalchemy.orm import Session

from marketplace.crud import crud_market_request
from marketplace.models.market_request import MarketRequest
from marketplace.models.market_request_status_history import MarketRequestStatusHistory
from tests.utils.market import (
    ADMIN_ID,
    CONSUMER_ID,
    OTHER_OWNER_ID,
    REQUEST_TEXT,
    create_market_request,
    create_partner,
    engage,
    headers,
)


def test_create_request(client: TestClient, db: Session) -> None:
    data = {"request_text": REQUEST_TEXT, "category": "Handwerk", "city": "Berlin"}

    response = client.post("/api/v1/requests", headers=headers(CONSUMER_ID), json=data)

    assert response.status_code == 201
    content = response.json()
    assert content["id"].startswith("req_")
    assert content["title"] == "Handwerk – Berlin"


def test_create_request_requires_token(client: TestClient, db: Session) -> None:
    response = client.post("/api/v1/requests", json={"request_text": REQUEST_TEXT})

    assert response.status_code == 401
    assert response.json()["error"] == "unauthorized"


def test_create_request_rejects_invalid_token(client: TestClient, db: Session) -> None:
    response = client.post(
        "/api/v1/requests",
        headers={"Authorization": "Bearer not-a-jwt"},
        json={"request_text": REQUEST_TEXT},
    )

    assert response.status_code == 401


def test_create_request_text_too_short(client: TestClient, db: Session) -> None:
    response = client.post(
        "/api/v1/requests", headers=headers(CONSUMER_ID), json={"request_text": "zu kurz"}
    )

    assert response.status_code == 400
    assert response.json()["error"] == "request_text_too_short"


def test_create_request_missing_body_field(client: TestClient, db: Session) -> None:
    response = client.post("/api/v1/requests", headers=headers(CONSUMER_ID), json={})

    assert response.status_code == 400
    content = response.json()
    assert content["error"] == "validation_error"
    assert content["validation_errors"]


def test_list_my_requests_hides_deleted(client: TestClient, db: Session) -> None:
    visible = create_market_request(db)
    create_market_request(db, status="Gelöscht")
    create_market_request(db, user_id="someone_else")

    response = client.get("/api/v1/requests/mine", headers=headers(CONSUMER_ID))

    assert response.status_code == 200
    ids = [r["id"] for r in response.json()["requests"]]
    assert ids == [visible.id]


def test_open_requests_only_for_partners(client: TestClient, db: Session) -> None:
    open_request = create_market_request(db)
    create_market_request(db, status="Aktiv")
    create_partner(db)

    consumer_response = client.get("/api/v1/requests/open", headers=headers(CONSUMER_ID))
    partner_response = client.get("/api/v1/requests/open", headers=headers("user_partner_p"))

    assert consumer_response.status_code == 403
    assert partner_response.status_code == 200
    assert [r["id"] for r in partner_response.json()["requests"]] == [open_request.id]


def test_get_request_visibility(client: TestClient, db: Session) -> None:
    market_request = create_market_request(db, status="Aktiv")

    owner = client.get(f"/api/v1/requests/{market_request.id}", headers=headers(CONSUMER_ID))
    stranger = client.get(f"/api/v1/requests/{market_request.id}", headers=headers("nobody"))
    admin = client.get(
        f"/api/v1/requests/{market_request.id}", headers=headers(ADMIN_ID, role="admin")
    )
    missing = client.get("/api/v1/requests/req_missing", headers=headers(CONSUMER_ID))

    assert owner.status_code == 200
    assert owner.json()["status"] == "Aktiv"
    assert stranger.status_code == 403
    assert admin.status_code == 200
    assert missing.status_code == 404
    assert missing.json()["error"] == "request_not_found"


def test_update_request(client: TestClient, db: Session) -> None:
    market_request = create_market_request(db)

    response = client.patch(
        f"/api/v1/requests/{market_request.id}",
        headers=headers(CONSUMER_ID),
        json={"summary": "Neuer Titel", "city": "Hamburg"},
    )

    assert response.status_code == 200
    content = response.json()
    assert content["title"] == "Neuer Titel"
    assert content["city"] == "Hamburg"


def test_update_request_by_stranger_is_forbidden(client: TestClient, db: Session) -> None:
    market_request = create_market_request(db)

    response = client.patch(
        f"/api/v1/requests/{market_request.id}",
        headers=headers("nobody"),
        json={"summary": "Gekapert"},
    )

    assert response.status_code == 403
    assert response.json()["error"] == "forbidden"


def test_soft_delete_and_restore(client: TestClient, db: Session) -> None:
    market_request = create_market_request(db)
    url = f"/api/v1/requests/{market_request.id}/status"

    deleted = client.post(url, headers=headers(CONSUMER_ID), json={"status": "Gelöscht"})
    restored = client.post(url, headers=headers(CONSUMER_ID), json={"status": "Anfrage"})

    assert deleted.status_code == 200
    assert deleted.json()["status"] == "Gelöscht"
    assert restored.status_code == 200
    assert restored.json()["status"] == "Anfrage"

    history = client.get(
        f"/api/v1/requests/{market_request.id}/history", headers=headers(CONSUMER_ID)
    ).json()
    assert [(h["old_status"], h["new_status"]) for h in history] == [
        ("Anfrage", "Gelöscht"),
        ("Gelöscht", "Anfrage"),
    ]
    assert all(h["changed_by"] == CONSUMER_ID for h in history)


def test_illegal_status_transition_is_rejected(client: TestClient, db: Session) -> None:
    market_request = create_market_request(db)

    response = client.post(
        f"/api/v1/requests/{market_request.id}/status",
        headers=headers(CONSUMER_ID),
        json={"status": "Abgeschlossen"},
    )

    assert response.status_code == 409
    content = response.json()
    assert content["error"] == "invalid_transition"
    assert content["from"] == "Anfrage"
    assert content["to"] == "Abgeschlossen"
    db.expire_all()
    assert db.query(MarketRequestStatusHistory).count() == 0


def test_owner_cannot_force_admin_only_status(client: TestClient, db: Session) -> None:
    market_request = create_market_request(db)

    response = client.post(
        f"/api/v1/requests/{market_request.id}/status",
        headers=headers(CONSUMER_ID),
        json={"status": "Aktiv"},
    )

    assert response.status_code == 403


def test_unknown_status_label_is_a_validation_error(client: TestClient, db: Session) -> None:
    market_request = create_market_request(db)

    response = client.post(
        f"/api/v1/requests/{market_request.id}/status",
        headers=headers(CONSUMER_ID),
        json={"status": "Irgendwas"},
    )

    assert response.status_code == 400


def test_report_problem_by_owner(client: TestClient, db: Session) -> None:
    market_request = create_market_request(db)

    response = client.post(
        f"/api/v1/requests/{market_request.id}/problem",
        headers=headers(CONSUMER_ID),
        json={"note": "Niemand meldet sich."},
    )

    assert response.status_code == 201
    assert response.json() == {"ok": True, "status": "Problem"}


def test_report_problem_note_too_short(client: TestClient, db: Session) -> None:
    market_request = create_market_request(db)

    response = client.post(
        f"/api/v1/requests/{market_request.id}/problem",
        headers=headers(CONSUMER_ID),
        json={"note": "kurz"},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "note_too_short"


def test_report_problem_by_partner_writes_event(client: TestClient, db: Session) -> None:
    ctx = engage(client, db)

    response = client.post(
        f"/api/v1/requests/{ctx['request_id']}/problem",
        headers=headers(ctx["partner"].owner_user_id),
        json={"note": "Kunde nicht erreichbar"},
    )

    assert response.status_code == 201
    messages = client.get(
        f"/api/v1/chat/{ctx['request_id']}/messages", headers=headers(CONSUMER_ID)
    ).json()["messages"]
    assert messages[-1]["kind"] == "problem_reported"
    assert messages[-1]["payload"]["note"] == "Kunde nicht erreichbar"


def test_report_problem_by_unrelated_partner_is_forbidden(client: TestClient, db: Session) -> None:
    ctx = engage(client, db)
    create_partner(db, owner_user_id=OTHER_OWNER_ID)

    response = client.post(
        f"/api/v1/requests/{ctx['request_id']}/problem",
        headers=headers(OTHER_OWNER_ID),
        json={"note": "Ich bin nicht beteiligt"},
    )

    assert response.status_code == 403


def test_report_problem_on_deleted_request_is_rejected(client: TestClient, db: Session) -> None:
    market_request = create_market_request(db, status="Gelöscht")

    response = client.post(
        f"/api/v1/requests/{market_request.id}/problem",
        headers=headers(CONSUMER_ID),
        json={"note": "Bitte wiederherstellen"},
    )

    assert response.status_code == 409
    assert response.json()["error"] == "invalid_transition"


def test_report_problem_sees_delete_committed_before_the_lock(
    client: TestClient, db: Session, monkeypatch
) -> None:
    """
    A soft delete lands between the first read and the row lock. The lock
    must hand back the deleted row, not the instance loaded earlier.
    """
    ctx = engage(client, db)
    real_get_for_update = crud_market_request.get_for_update

    def delete_then_lock(session, request_id):
        session.execute(
            update(MarketRequest)
            .where(MarketRequest.id == request_id)
            .values(status="Gelöscht"),
            execution_options={"synchronize_session": False},
        )
        return real_get_for_update(session, request_id)

    monkeypatch.setattr(crud_market_request, "get_for_update", delete_then_lock)

    response = client.post(
        f"/api/v1/requests/{ctx['request_id']}/problem",
        headers=headers(CONSUMER_ID),
        json={"note": "Der Partner meldet sich nicht"},
    )

    assert response.status_code == 409
    assert response.json()["error"] == "invalid_transition"
    assert response.json()["from"] == "Gelöscht"
    db.expire_all()
    problems = db.query(MarketRequestStatusHistory).filter_by(
        request_id=ctx["request_id"], new_status="Problem"
    ).count()
    assert problems == 0


def test_update_request_rejects_inverted_budget(client: TestClient, db: Session) -> None:
    market_request = create_market_request(db)
    client.patch(
        f"/api/v1/requests/{market_request.id}",
        headers=headers(CONSUMER_ID),
        json={"budget_min": "500", "budget_max": "2000"},
    )

    response = client.patch(
        f"/api/v1/requests/{market_request.id}",
        headers=headers(CONSUMER_ID),
        json={"budget_max": "100"},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_budget_range"
    db.expire_all()
    assert db.get(MarketRequest, market_request.id).budget_max == Decimal("2000")

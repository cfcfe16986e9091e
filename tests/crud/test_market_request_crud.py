from unittest.mock import MagicMock

from marketplace.crud import crud_application, crud_market_request, crud_status_history
from marketplace.schemas.market_request import MarketRequestCreate, MarketRequestUpdate
from marketplace.models.market_request import MarketRequest


def test_create_market_request_flushes_without_commit():
    """
    Writes join the caller's unit of work; the crud layer never commits.
    """
    db_session = MagicMock()
    request_in = MarketRequestCreate(
        request_text="Wir suchen Unterstützung bei der Renovierung.",
        summary="Renovierung",
        execution="vorOrt",
    )

    result = crud_market_request.create(db=db_session, user_id="user_abc", data=request_in)

    db_session.add.assert_called_once_with(result)
    db_session.flush.assert_called_once()
    db_session.commit.assert_not_called()
    assert result.status == "Anfrage"
    assert result.execution == "vorOrt"
    assert result.applications_count == 0


def test_update_market_request_only_touches_sent_fields():
    db_session = MagicMock()
    market_request = MarketRequest(id="req_1", summary="Alt", city="Berlin")

    crud_market_request.update(
        db=db_session, market_request=market_request, data=MarketRequestUpdate(summary="Neu")
    )

    assert market_request.summary == "Neu"
    assert market_request.city == "Berlin"
    db_session.commit.assert_not_called()


def test_record_status_history():
    db_session = MagicMock()

    entry = crud_status_history.record(
        db_session,
        request_id="req_1",
        old_status="Anfrage",
        new_status="Aktiv",
        changed_by="user_abc",
    )

    db_session.add.assert_called_once_with(entry)
    assert entry.new_status == "Aktiv"


def test_compare_and_set_reports_lost_race():
    db_session = MagicMock()
    db_session.query.return_value.filter.return_value.update.return_value = 0

    assert not crud_application.compare_and_set_status(
        db_session, application_id="app_1", expected="submitted", new_status="accepted"
    )

    db_session.query.return_value.filter.return_value.update.return_value = 1
    assert crud_application.compare_and_set_status(
        db_session, application_id="app_1", expected="submitted", new_status="accepted"
    )

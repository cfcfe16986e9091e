# marketplace/api/v1/endpoints/konsument.py
"""Consumer-side endpoints: appointments, offers, orders, rating and personal data."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from marketplace.api import deps
from marketplace.core.permissions import Caller
from marketplace.db.session import get_db
from marketplace.schemas.offer import OfferStatusResult
from marketplace.schemas.order import OrderStatusResult
from marketplace.schemas.personal_data import PersonalDataResponse, PersonalDataShare
from marketplace.schemas.rating import RatingSubmit
from marketplace.services import appointments as appointment_service
from marketplace.services import offers as offer_service
from marketplace.services import orders as order_service
from marketplace.services import personal_data as personal_data_service
from marketplace.services import ratings as rating_service

router = APIRouter(prefix="/konsument", tags=["Konsument"])


@router.post("/chat/{requestId}/appointment/{appointmentId}/confirm")
def confirm_appointment(
    requestId: str,
    appointmentId: str,
    db: Session = Depends(get_db),
    caller: Caller = Depends(deps.get_caller),
):
    appointment_service.confirm(db, caller, requestId, appointmentId)
    return {"ok": True}


@router.post("/chat/{requestId}/appointment/{appointmentId}/decline")
def decline_appointment(
    requestId: str,
    appointmentId: str,
    db: Session = Depends(get_db),
    caller: Caller = Depends(deps.get_caller),
):
    appointment_service.decline(db, caller, requestId, appointmentId)
    return {"ok": True}


@router.post("/chat/{requestId}/personal-data", response_model=PersonalDataResponse)
def share_personal_data(
    requestId: str,
    data: PersonalDataShare,
    db: Session = Depends(get_db),
    caller: Caller = Depends(deps.get_caller),
):
    """Create or replace the billing and execution address for the request."""
    return personal_data_service.share(db, caller, requestId, data)


@router.post("/chat/{requestId}/personal-data/delete")
def delete_personal_data(
    requestId: str,
    db: Session = Depends(get_db),
    caller: Caller = Depends(deps.get_caller),
):
    personal_data_service.delete(db, caller, requestId)
    return {"ok": True}


@router.post("/offers/{offerId}/accept", response_model=OfferStatusResult)
def accept_offer(
    offerId: str,
    db: Session = Depends(get_db),
    caller: Caller = Depends(deps.get_caller),
):
    """Idempotent: accepting an accepted offer returns the same result."""
    return {"status": offer_service.accept(db, caller, offerId)}


@router.post("/offers/{offerId}/decline", response_model=OfferStatusResult)
def decline_offer(
    offerId: str,
    db: Session = Depends(get_db),
    caller: Caller = Depends(deps.get_caller),
):
    return {"status": offer_service.decline(db, caller, offerId)}


@router.post("/orders/{orderId}/accept", response_model=OrderStatusResult)
def accept_order(
    orderId: str,
    db: Session = Depends(get_db),
    caller: Caller = Depends(deps.get_caller),
):
    return {"status": order_service.accept(db, caller, orderId)}


@router.post("/orders/{orderId}/decline", response_model=OrderStatusResult)
def decline_order(
    orderId: str,
    db: Session = Depends(get_db),
    caller: Caller = Depends(deps.get_caller),
):
    """Idempotent: declining a declined order returns the same result."""
    return {"status": order_service.decline(db, caller, orderId)}


@router.post("/orders/{orderId}/cancel", response_model=OrderStatusResult)
def cancel_order(
    orderId: str,
    db: Session = Depends(get_db),
    caller: Caller = Depends(deps.get_caller),
):
    """Withdraw from an order within the withdrawal period."""
    return {"status": order_service.cancel(db, caller, orderId)}


@router.post("/ratings/submit")
def submit_rating(
    data: RatingSubmit,
    db: Session = Depends(get_db),
    caller: Caller = Depends(deps.get_caller),
):
    rating_service.submit(db, caller, data)
    return {"ok": True}

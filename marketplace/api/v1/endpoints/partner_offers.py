from typing import List
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from marketplace.api import deps
from marketplace.core.permissions import Caller
from marketplace.db.session import get_db
from marketplace.schemas.offer import OfferCreate, OfferCreated, OfferResponse
from marketplace.services import offers as offer_service

router = APIRouter(prefix="/partners/offers", tags=["Partner Offers"])


@router.post("/create", response_model=OfferCreated, status_code=status.HTTP_201_CREATED)
def create_offer(
    data: OfferCreate,
    db: Session = Depends(get_db),
    caller: Caller = Depends(deps.get_caller),
):
    """Put up an offer; the request moves to 'Angebot erstellt'."""
    offer = offer_service.create(db, caller, data)
    return {"offer_id": offer.id, "signature_id": offer.signature_id}


@router.get("/by-request", response_model=List[OfferResponse])
def list_offers_by_request(
    request_id: str = Query(...),
    db: Session = Depends(get_db),
    caller: Caller = Depends(deps.get_caller),
):
    return offer_service.list_for_request(db, caller, request_id)

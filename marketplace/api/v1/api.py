# marketplace/api/v1/api.py

from fastapi import APIRouter
from marketplace.api.v1.endpoints import (
    health,
    requests,
    applications,
    chat,
    konsument,
    partner_orders,
    partner_offers,
)

# This is the main router for the v1 API.
# It will include all the specific endpoint routers.
api_router = APIRouter()

api_router.include_router(health.router)
api_router.include_router(requests.router)
api_router.include_router(applications.router)
api_router.include_router(chat.router)
api_router.include_router(konsument.router)
api_router.include_router(partner_orders.router)
api_router.include_router(partner_offers.router)

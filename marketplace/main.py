# marketplace/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from marketplace.api.v1.api import api_router
from marketplace.core.config import settings
from marketplace.core.errors import register_exception_handlers
from marketplace.core.limiter import limiter

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Marketplace engagement service starting up (env={settings.ENV})")
    yield
    logger.info("Marketplace engagement service shutting down")


app = FastAPI(
    title="Marketplace Engagement Service",
    version="1.0.0",
    description="""
        Lifecycle of a marketplace engagement: a consumer's request, partner
        applications, appointments, orders and the closing rating.

        ## Authentication

        Every endpoint except `/health` requires a JWT via the
        `Authorization: Bearer <token>` header.
        """,
    lifespan=lifespan,
)

app.state.limiter = limiter
register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,  # Allow specific origins
    allow_credentials=True,  # Allow cookies and authorization headers
    allow_methods=["*"],  # Allow all methods (GET, POST, etc.)
    allow_headers=["*"],  # Allow all headers
)

app.include_router(api_router, prefix="/api/v1")


@app.get("/")
def read_root():
    return {"status": "Marketplace Engagement Service is running"}

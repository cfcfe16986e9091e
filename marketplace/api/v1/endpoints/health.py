# marketplace/api/v1/endpoints/health.py
"""
Health check endpoints for monitoring system status.
"""
import logging
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from marketplace.core.errors import Upstream
from marketplace.db.session import get_db

router = APIRouter(prefix="/health", tags=["Health"])
logger = logging.getLogger(__name__)


@router.get("")
def health_check():
    """Basic health check - API is responding."""
    return {"status": "healthy", "service": "marketplace-engagement-service"}


@router.get("/db")
def database_health(db: Session = Depends(get_db)):
    """Check database connectivity."""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {type(e).__name__}")
        raise Upstream(token="database_unhealthy", message="Database unhealthy.")
    return {"status": "healthy", "component": "database"}

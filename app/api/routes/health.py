"""
Health check endpoint for deployment monitoring.
"""
import logging
from fastapi import APIRouter, Depends
from datetime import datetime, timezone
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_db
from app.core.config import APP_VERSION, missing_required_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
def health_check(db: Session = Depends(get_db)):
    """
    Health check endpoint for deployment monitoring.

    Reports "degraded" when the database is unreachable or required
    settings are missing.
    """
    status = "healthy"

    try:
        db.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception as e:
        logger.error(f"Health check database error: {e}")
        db_status = f"error: {e}"
        status = "degraded"

    missing = missing_required_settings()
    if missing:
        logger.warning(f"Missing environment variables: {missing}")
        status = "degraded"

    return {
        "status": status,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": db_status,
        "missing_settings": missing,
        "version": APP_VERSION,
    }

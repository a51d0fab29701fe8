import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.db import engine

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", summary="Health check")
def read_health() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok", "service": settings.PROJECT_NAME}


@router.get("/ready", summary="Readiness check")
def read_ready():
    """Readiness probe: the scheduling store must answer a trivial query."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Readiness check failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "database": "disconnected",
                "error": str(e) if settings.ENVIRONMENT != "production" else "Database connection failed",
            },
        )
    return {"status": "ready", "database": "connected"}

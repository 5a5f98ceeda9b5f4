from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from marketplace.config import settings
from marketplace.db import engine
from marketplace.utils.logging import get_logger

log = get_logger("api.health")

router = APIRouter()


@router.get("/health", tags=["health"])
def health():
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        db_ok = True
    except SQLAlchemyError as e:
        log.warning("health check: database unreachable: %s", e)
        db_ok = False

    return {
        "status": "ok" if db_ok else "degraded",
        "db": db_ok,
        "reservation_sweep": settings.RESERVATION_SWEEP_ENABLED,
    }

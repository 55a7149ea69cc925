"""
Health check endpoint.
"""

import logging
from typing import Dict, Union

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sample_app.core.cache import check_redis_health
from sample_app.core.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check(db: Session = Depends(get_db)) -> Dict[str, Union[str, bool]]:
    """
    Report database and Redis reachability.

    Redis is only a cache, so losing it degrades the service but does not
    take it down.
    """
    try:
        db.execute(text("SELECT 1"))
        database_ok = True
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        database_ok = False

    redis_ok = check_redis_health()
    return {
        "status": "healthy" if database_ok and redis_ok else "degraded",
        "database": database_ok,
        "redis": redis_ok,
    }

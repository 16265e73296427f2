from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends

from inventsync.api.dependencies import get_database
from inventsync.infrastructure.database.connection import Database

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(database: Database = Depends(get_database)) -> dict[str, str]:
    """Liveness + database check."""
    db_status = "connected"
    try:
        await database.ping()
    except Exception as exc:
        logger.warning("health_database_unreachable", error=str(exc))
        db_status = f"error: {exc}"

    return {
        "status": "ok" if db_status == "connected" else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": db_status,
    }

"""Health check endpoint.

Reports database and profile-image storage reachability, and whether city
geocoding is configured.  Either backend being unreachable yields 503.
"""

import logging
from typing import Any

from fastapi import APIRouter
from starlette.responses import JSONResponse

from app.core.config import settings
from app.core.constants import CANDIDATES_TABLE
from app.db.supabase import get_supabase

logger = logging.getLogger(__name__)

router = APIRouter()


def _check_database(client: Any) -> str:
    try:
        client.table(CANDIDATES_TABLE).select("id").limit(1).execute()
    except Exception:
        logger.warning("health_database_unreachable", exc_info=True)
        return "disconnected"
    return "connected"


def _check_storage(client: Any) -> str:
    try:
        client.storage.get_bucket(settings.SUPABASE_STORAGE_BUCKET)
    except Exception:
        logger.warning(
            "health_storage_unreachable",
            extra={"bucket": settings.SUPABASE_STORAGE_BUCKET},
            exc_info=True,
        )
        return "unavailable"
    return "available"


@router.get("/health")
async def health_check() -> Any:
    """Return 200 with component status, or 503 when a backend is down."""
    try:
        client = get_supabase()
    except Exception:
        logger.warning("health_supabase_client_failed", exc_info=True)
        database, storage = "disconnected", "unavailable"
    else:
        database = _check_database(client)
        storage = _check_storage(client)

    healthy = database == "connected" and storage == "available"
    payload: dict[str, str] = {
        "status": "ok" if healthy else "degraded",
        "database": database,
        "storage": storage,
        "geocoding": "enabled" if settings.GOOGLE_MAPS_API_KEY else "disabled",
    }

    if not healthy:
        return JSONResponse(status_code=503, content=payload)

    return payload

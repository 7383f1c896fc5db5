# app/routers/health.py
"""
System health check endpoint.
Returns status of backend + remote datastore + service window.
"""

from fastapi import APIRouter, Depends
from datetime import datetime
from app.config import settings
from app.database import RemoteStore, get_store
from app.services.access_gate import service_window
from app.services.credential_service import check_server_connection

router = APIRouter()


@router.get("/health", summary="System health check")
async def health_check(store: RemoteStore = Depends(get_store)):
    """
    Returns:
    - Backend status
    - Remote datastore connectivity ("not_configured" if URL/key are missing)
    - Whether the lookup service window is currently open
    """
    result = {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat(),
        "backend": "ok",
        "database": "unknown",
        "service_open": service_window.refresh(),
    }

    if not settings.REMOTE_CONFIGURED:
        result["database"] = "not_configured"
        result["status"] = "degraded"
    elif await check_server_connection(store):
        result["database"] = "ok"
    else:
        result["database"] = "unreachable"
        result["status"] = "degraded"

    return result

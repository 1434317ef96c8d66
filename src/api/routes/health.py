"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from api.models.responses import HealthResponse
from core.config import API_VERSION
from core.database import get_connection
from core.graph_client import graph_credentials_configured

router = APIRouter()


def database_available() -> bool:
    try:
        conn = get_connection()
        conn.execute("SELECT 1 FROM settings LIMIT 1")
        conn.close()
        return True
    except Exception:
        return False


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint for monitoring.

    Returns 200 if healthy, 503 if the database cannot be opened.
    """
    db_ok = database_available()
    graph_ok = graph_credentials_configured()
    timestamp = datetime.now(timezone.utc).isoformat()

    if db_ok:
        return HealthResponse(
            status="healthy",
            version=API_VERSION,
            database_available=True,
            graph_configured=graph_ok,
            timestamp=timestamp,
        )
    else:
        return JSONResponse(
            status_code=503,
            content=HealthResponse(
                status="unhealthy",
                version=API_VERSION,
                database_available=False,
                graph_configured=graph_ok,
                timestamp=timestamp,
                error="Database not available",
            ).model_dump(),
        )

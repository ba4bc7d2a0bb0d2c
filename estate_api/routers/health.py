"""
Health check endpoint.
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime, timezone
from estate_api.database import get_db, check_database_connection
import logging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    summary="Health check",
    responses={
        503: {
            "description": "Database unreachable",
            "content": {"application/json": {"example": {"status": "ERROR", "database": "Disconnected"}}}
        }
    }
)
async def health_check(db: AsyncSession = Depends(get_db)) -> JSONResponse:
    """
    Report API and database status.

    Returns 200 when a trivial query succeeds and 503 otherwise.
    """
    timestamp = datetime.now(timezone.utc).isoformat()
    db_healthy = await check_database_connection(db)

    if not db_healthy:
        logger.error("Health check failed: database disconnected")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "ERROR", "database": "Disconnected", "timestamp": timestamp}
        )

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={"status": "OK", "database": "Connected", "timestamp": timestamp}
    )

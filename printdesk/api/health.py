"""Health check endpoint."""
import logging
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from printdesk.core.dependencies import get_hub
from printdesk.db.database import get_db
from printdesk.services.sync.hub import SubscriptionHub

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check(
    request: Request,
    db: AsyncSession = Depends(get_db),
    hub: SubscriptionHub = Depends(get_hub),
):
    """Report database reachability and the number of live order subscriptions."""
    logger.debug(
        f"[HEALTH] Health check requested - Client: {request.client.host if request.client else 'unknown'}"
    )
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"[HEALTH] Database unreachable - Error: {type(e).__name__}: {str(e)}")
        return JSONResponse(
            status_code=503,
            content={"status": "degraded", "database": "unreachable"},
        )
    return {
        "status": "healthy",
        "database": "ok",
        "live_scopes": len(hub.active_scopes),
    }

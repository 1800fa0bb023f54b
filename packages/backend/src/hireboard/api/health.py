"""Health check endpoint.

Reports whether the server, the database and Redis are reachable, plus
how many users currently hold a live push connection.
"""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from hireboard import __version__
from hireboard.db.engine import get_db
from hireboard.db.redis import get_redis
from hireboard.realtime.registry import ConnectionRegistry, get_registry

router = APIRouter()


@router.get("/health")
async def health_check(
    db: AsyncSession = Depends(get_db),
    registry: ConnectionRegistry = Depends(get_registry),
):
    """Check server health and dependency connectivity."""
    checks = {"server": "ok", "version": __version__}

    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        checks["database"] = f"error: {e}"

    # Redis only backs rate limiting; its absence degrades nothing else.
    try:
        await get_redis().ping()
        checks["redis"] = "ok"
    except Exception as e:
        checks["redis"] = f"unavailable: {e}"

    status = "healthy" if checks["database"] == "ok" else "degraded"
    return {
        "status": status,
        **checks,
        "realtime": {
            "connected_users": len(registry),
            "open_connections": len(registry.connections()),
        },
    }

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from core.container import AppServices
from core.errors import StorageError
from db.applications import count_applications
from db.base import ping
from .deps import get_services

router = APIRouter(prefix="/api")


def _counters(services: AppServices) -> dict:
    submissions = services.submissions
    return {
        "submissions_accepted": submissions.accepted,
        "submissions_rejected": submissions.rejected,
        "submissions_rate_limited": submissions.rate_limited,
        "notifications_sent": services.notifier.sent,
        "notifications_failed": services.notifier.failed,
        "cache_hits": services.cache.hits,
        "cache_misses": services.cache.misses,
        "db_connections_in_use": services.pool.in_use,
    }


@router.get("/status")
async def get_status(services: AppServices = Depends(get_services)):
    bot_state = "active" if services.bot is not None else "inactive"
    try:
        # мимо кеша: статус показывает реальное состояние БД
        applications_count = await count_applications(services.pool)
    except StorageError:
        return JSONResponse(
            status_code=503,
            content={
                "success": False,
                "error": "Database error",
                "server": "online",
                "database": "disconnected",
                "telegram_bot": bot_state,
            },
        )

    return {
        "success": True,
        "server": "online",
        "database": "connected",
        "telegram_bot": bot_state,
        "applications_count": applications_count,
        "counters": _counters(services),
        "uptime_seconds": round(time.monotonic() - services.started_at, 1),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/health")
async def get_health(services: AppServices = Depends(get_services)):
    if not await ping(services.pool):
        return JSONResponse(
            status_code=503,
            content={"success": False, "status": "unavailable", "database": False},
        )
    return {"success": True, "status": "ok", "database": True}


@router.get("/info")
async def get_info(services: AppServices = Depends(get_services)):
    return {
        "success": True,
        "message": "🚀 Сервер заявок работает!",
        "database": "configured",
        "telegram_bot": "active" if services.bot is not None else "not configured",
        "notifications": "enabled" if services.notifier.enabled else "disabled",
        "public_url": services.public_url,
        "endpoints": {
            "submit_application": "POST /api/application",
            "get_applications": "GET /api/applications",
            "count": "GET /api/count",
            "get_status": "GET /api/status",
            "health": "GET /api/health",
            "info": "GET /api/info",
        },
    }

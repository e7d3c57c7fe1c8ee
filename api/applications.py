from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Request

from core.container import AppServices
from core.errors import ValidationError
from .deps import get_services

router = APIRouter(prefix="/api")


@router.post("/application", status_code=201)
async def submit_application(
    request: Request,
    background_tasks: BackgroundTasks,
    services: AppServices = Depends(get_services),
):
    try:
        payload = await request.json()
    except ValueError:
        raise ValidationError("request body must be valid JSON")

    application = await services.submissions.submit(
        payload,
        schedule=background_tasks.add_task,
    )

    return {
        "success": True,
        "message": "✅ Заявка успешно сохранена",
        "data": {
            "id": application.id,
            "nickname": application.nickname,
            "telegram": application.telegram,
            "role": application.role,
            "timestamp": application.created_at.isoformat(),
            "telegram_notified": services.notifier.enabled,
        },
    }


@router.get("/applications")
async def get_applications(
    role: Optional[str] = None,
    status: Optional[str] = None,
    limit: int = 10,
    offset: int = 0,
    sort: Optional[str] = None,
    order: Optional[str] = None,
    services: AppServices = Depends(get_services),
):
    result = await services.queries.list(
        role=role,
        status=status,
        limit=limit,
        offset=offset,
        sort=sort,
        order=order,
    )

    return {
        "success": True,
        "data": [a.to_dict() for a in result.rows],
        "pagination": {
            "total": result.total,
            "limit": result.limit,
            "offset": result.offset,
            "hasMore": result.has_more,
        },
        "cached": result.cached,
    }


@router.get("/count")
async def get_count(
    role: Optional[str] = None,
    status: Optional[str] = None,
    services: AppServices = Depends(get_services),
):
    count = await services.queries.count(role=role, status=status)
    return {"success": True, "count": count}

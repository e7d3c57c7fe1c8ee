import logging
import math

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.container import AppServices
from core.errors import AppError, RateLimitedError, StorageError
from .applications import router as applications_router
from .status import router as status_router

logger = logging.getLogger(__name__)

STORAGE_ERROR_TEXT = "Ошибка сервера, попробуйте позже"


def _error(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
        headers=headers,
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if isinstance(exc, StorageError):
        # детали остаются в логах
        return _error(exc.status_code, STORAGE_ERROR_TEXT)
    headers = None
    if isinstance(exc, RateLimitedError) and exc.retry_after > 0:
        headers = {"Retry-After": str(math.ceil(exc.retry_after))}
    return _error(exc.status_code, exc.message, headers)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        loc = ".".join(str(p) for p in errors[0].get("loc", ()) if p not in ("query", "body"))
        message = f"invalid parameter: {loc}" if loc else "invalid request"
    else:
        message = "invalid request"
    return _error(400, message)


async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("❌ Необработанная ошибка %s %s", request.method, request.url.path)
    return _error(500, STORAGE_ERROR_TEXT)


def create_app(services: AppServices) -> FastAPI:
    app = FastAPI(title="Applications API")
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, internal_error_handler)

    app.include_router(applications_router)
    app.include_router(status_router)
    return app

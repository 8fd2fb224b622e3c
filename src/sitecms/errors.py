# src/sitecms/errors.py
import logging
import traceback
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.sitecms.core.config import Settings
from src.sitecms.core.exceptions import AppError, field_errors

logger = logging.getLogger(__name__)


def error_body(settings: Settings, message: str, exc: Exception, **extra: Any) -> dict:
    """Error payload; the traceback is included outside production."""
    body = {"error": message, **extra}
    if not settings.is_production:
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return body


def _body(request: Request, message: str, exc: Exception, **extra: Any) -> dict:
    return error_body(request.app.state.settings, message, exc, **extra)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("Request error on %s %s: %s", request.method, request.url.path, exc.message)
        else:
            logger.info("Request rejected on %s %s: %s (%d)", request.method, request.url.path, exc.message, exc.status_code)
        extra = {"details": exc.details} if exc.details else {}
        return JSONResponse(status_code=exc.status_code, content=_body(request, exc.message, exc, **extra))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        details = field_errors(exc.errors())
        return JSONResponse(
            status_code=400,
            content=_body(request, "Validation failed", exc, details=details),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        extra = {"path": request.url.path} if exc.status_code == 404 else {}
        message = "Endpoint not found" if exc.status_code == 404 else str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content=_body(request, message, exc, **extra),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        message = "Internal Server Error"
        if not request.app.state.settings.is_production:
            message = str(exc) or message
        return JSONResponse(status_code=500, content=_body(request, message, exc))

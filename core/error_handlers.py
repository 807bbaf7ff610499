import asyncio
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from starlette.exceptions import HTTPException

from core.errors import AppError, Unavailable

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Все ошибки уходят клиенту в форме {status, message}."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
        else:
            logger.info("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_response())

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"status": exc.status_code, "message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"status": status.HTTP_400_BAD_REQUEST, "message": _describe(exc)},
        )

    @app.exception_handler(asyncio.TimeoutError)
    @app.exception_handler(PoolTimeoutError)
    async def timeout_handler(request: Request, exc: Exception):
        logger.error(f"Storage timeout on {request.url.path}: {exc!r}")
        return JSONResponse(
            status_code=Unavailable.status_code,
            content=Unavailable("Storage did not respond in time").to_response(),
        )

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"status": 500, "message": "Internal server error"},
        )


def _describe(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"] if loc not in ("path", "query", "body"))
        parts.append(f"{field}: {error['msg']}" if field else error["msg"])
    return "Invalid request: " + "; ".join(parts)

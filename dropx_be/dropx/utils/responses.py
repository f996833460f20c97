from datetime import datetime, timezone
from typing import Any
import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from dropx.utils.errors import AppError, InternalError, MethodNotAllowed

logger = logging.getLogger(__name__)


def envelope(success: bool, message: str, data: Any = None) -> dict:
    return {
        "success": success,
        "message": message,
        "data": jsonable_encoder(data) if data is not None else None,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def ok(data: Any = None, message: str = "OK") -> dict:
    return envelope(True, message, data)


def error_response(status_code: int, message: str, data: Any = None, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=envelope(False, message, data), headers=headers)


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    # loc is e.g. ("body", "quantity"); drop the transport part
    field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path"))
    msg = first.get("msg", "Invalid value")
    return f"{field}: {msg}" if field else msg


async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return error_response(exc.status_code, exc.message, exc.data)


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 405:
        err = MethodNotAllowed()
        return error_response(err.status_code, err.message, headers=getattr(exc, "headers", None))
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return error_response(exc.status_code, message, headers=getattr(exc, "headers", None))


async def validation_error_handler(request: Request, exc: RequestValidationError):
    return error_response(400, _validation_message(exc))


async def unhandled_error_handler(request: Request, exc: Exception):
    # Raw database/driver text stays in the logs
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(InternalError.status_code, InternalError.default_message)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

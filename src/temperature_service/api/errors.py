"""Exception handlers translating error kinds to JSON responses.

Every error body has the shape ``{"error": kind, "message": text}``.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from temperature_service.weather.errors import InvalidInputError, TemperatureServiceError

logger = logging.getLogger(__name__)


def error_response(status_code: int, kind: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": kind, "message": message})


async def service_error_handler(request: Request, exc: TemperatureServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{exc.kind} on {request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.kind} on {request.method} {request.url.path}: {exc.message}")
    return error_response(exc.status_code, exc.kind, exc.message)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'] if part != 'query')}: {error['msg']}"
        for error in exc.errors()
    )
    logger.info(f"Invalid request parameters on {request.url.path}: {details}")
    return error_response(InvalidInputError.status_code, InvalidInputError.kind, details or "Invalid request")


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return error_response(404, "NotFound", f"Endpoint not found: {request.url.path}. See GET /api/docs")
    return error_response(exc.status_code, "HTTPError", str(exc.detail))


def register_error_handlers(app: FastAPI) -> None:
    """Install the JSON error handlers on an application."""
    app.add_exception_handler(TemperatureServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)

"""Client-facing error taxonomy and the handlers that render it."""
from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .responses import error_response

logger = logging.getLogger(__name__)

INVALID_INPUTS = "invalid inputs"


class InvalidInput(HTTPException):
    def __init__(self, detail: str = INVALID_INPUTS) -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class Unauthorized(HTTPException):
    def __init__(self, detail: str = "unauthorized") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class Forbidden(HTTPException):
    def __init__(self, detail: str = "forbidden") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFound(HTTPException):
    def __init__(self, detail: str = "not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class Conflict(HTTPException):
    def __init__(self, detail: str = "conflict") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class TooManyRequests(HTTPException):
    def __init__(self, detail: str = "rate limit exceeded") -> None:
        super().__init__(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=detail)


def _envelope(status_code: int, message: str, error: Optional[Any] = None, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(error_response(message, error)),
        headers=headers,
    )


def http_exception_handler(_: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _envelope(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


def validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    fields = [
        {
            "field": ".".join(str(part) for part in err["loc"] if part != "body"),
            "message": err["msg"],
        }
        for err in exc.errors()
    ]
    return _envelope(status.HTTP_400_BAD_REQUEST, INVALID_INPUTS, fields)


def datastore_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Datastore failure on %s %s", request.method, request.url.path, exc_info=exc)
    return _envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, "internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    """Render every error through the response envelope."""

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, datastore_exception_handler)

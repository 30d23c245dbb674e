"""
Application errors and the JSON error body every route returns:

    {"error": {"code", "message", "request_id", ...}, "detail": message}

The request id is echoed in the ``x-request-id`` header as well.
"""

import logging
from typing import Optional
from uuid import uuid4

from fastapi import HTTPException
from fastapi.responses import JSONResponse
from starlette.requests import Request

from nourishnote.core.logging import get_request_id

logger = logging.getLogger("nourishnote")


class AppError(Exception):
    code = "app_error"
    status_code = 500

    def __init__(self, message: str, *, code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.code
        self.status_code = status_code or self.status_code

    def details(self) -> dict:
        """Extra keys merged into the ``error`` object of the response."""
        return {}


class ValidationError(AppError, ValueError):
    code = "validation_error"
    status_code = 400


class NotFoundError(AppError, LookupError):
    code = "not_found"
    status_code = 404


class QuotaExceededError(AppError):
    """Every entry slot in the trailing 24 hours is used."""
    code = "quota_exceeded"
    status_code = 403

    def __init__(self, message: str, *, cooldown_hours: int = 0):
        super().__init__(message)
        self.cooldown_hours = cooldown_hours

    def details(self) -> dict:
        return {"cooldown_hours": self.cooldown_hours}


class UpstreamError(AppError):
    """The hosted language model failed to answer."""
    code = "upstream_error"
    status_code = 502


_HTTP_CODES = {401: "unauthorized", 404: "not_found"}


def request_id_for(request: Request) -> str:
    return getattr(request.state, "request_id", None) or get_request_id() or str(uuid4())


def error_response(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    details: Optional[dict] = None,
    exc_info: bool = False,
) -> JSONResponse:
    rid = request_id_for(request)
    logger.log(
        logging.ERROR if status_code >= 500 else logging.WARNING,
        f"{code}: {message}",
        exc_info=exc_info,
        extra={"event": "request.error", "request_id": rid, "error_code": code, "status": status_code},
    )
    body = {"error": {"code": code, "message": message, "request_id": rid, **(details or {})}, "detail": message}
    return JSONResponse(status_code=status_code, content=body, headers={"x-request-id": rid})


async def app_error_handler(request: Request, exc: AppError):
    return error_response(request, exc.status_code, exc.code, exc.message, exc.details())


async def http_error_handler(request: Request, exc: HTTPException):
    code = _HTTP_CODES.get(exc.status_code, "http_error")
    return error_response(request, exc.status_code, code, str(exc.detail or "HTTP error"))


async def unhandled_exception_handler(request: Request, exc: Exception):
    # Never leak the exception text to the client
    return error_response(request, 500, "internal_error", "Unexpected error", exc_info=True)

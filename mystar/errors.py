"""
Application errors and their JSON rendering.

Every edge function answers failures with the same envelope:
    {"success": false, "error": "<summary>", "details": "<optional detail>"}
"""

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class MyStarError(Exception):
    """Base error carrying the HTTP status and the public error envelope"""

    status_code = 500

    def __init__(self, error: str, details: Optional[Any] = None, status_code: Optional[int] = None):
        super().__init__(error)
        self.error = error
        self.details = details
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        body = {"success": False, "error": self.error}
        if self.details is not None:
            body["details"] = self.details
        return body


class AuthError(MyStarError):
    status_code = 401


class ValidationFailed(MyStarError):
    status_code = 400


class NotFound(MyStarError):
    status_code = 404


class Forbidden(MyStarError):
    status_code = 403


class ConfigurationError(MyStarError):
    status_code = 500


class UpstreamError(MyStarError):
    """A third-party API (PayPal, Resend) or a stored procedure failed"""

    status_code = 502


def error_response(error: MyStarError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


def register_error_handlers(app: FastAPI) -> None:
    """Install the JSON envelope for application and validation errors"""

    @app.exception_handler(MyStarError)
    async def handle_mystar_error(request: Request, exc: MyStarError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.error} ({exc.details})")
        else:
            logger.info(f"{request.method} {request.url.path} rejected: {exc.error}")
        return error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "Invalid request body", "details": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.exception(f"Unexpected error in {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "An unexpected error occurred", "details": str(exc)},
        )

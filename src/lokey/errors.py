"""
Exception hierarchy and FastAPI exception handlers.

Every error raised by the Lokalise client, the OpenAI wrapper or a route
handler derives from LokeyError and is rendered as:

    {"error_code": "...", "message": "...", **context}
"""

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = structlog.get_logger(__name__)


class LokeyError(Exception):
    """Base exception for all application errors.

    Attributes:
        status_code: HTTP status code to return when this error reaches a handler.
        error_code: Machine-readable error identifier for clients.
        context: Extra key-value pairs merged into the JSON error body.
    """

    status_code: int = 500

    def __init__(self, message: str, error_code: str = "INTERNAL_ERROR", **context: Any) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.context = context


class ValidationError(LokeyError):
    """Request data failed validation."""

    status_code: int = 400

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message, error_code="VALIDATION_ERROR", **context)


class AuthenticationError(LokeyError):
    status_code: int = 401

    def __init__(self, message: str = "Invalid credentials", **context: Any) -> None:
        super().__init__(message, error_code="INVALID_CREDENTIALS", **context)


class NotFoundError(LokeyError):
    status_code: int = 404

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message, error_code="NOT_FOUND", **context)


class ConfigurationError(LokeyError):
    """A required setting (API token, project id, API key) is missing."""

    status_code: int = 500

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message, error_code="CONFIGURATION_ERROR", **context)


class LokaliseError(LokeyError):
    """The Lokalise API rejected a request or could not be reached."""

    status_code: int = 502

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message, error_code="LOKALISE_ERROR", **context)


class TranslationError(LokeyError):
    """The language model call failed or returned something unusable."""

    status_code: int = 502

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message, error_code="TRANSLATION_FAILED", **context)


class ImageDownloadError(LokeyError):
    """Fetching a remote screenshot failed; status depends on the cause."""

    def __init__(self, message: str, status_code: int = 500, **context: Any) -> None:
        super().__init__(message, error_code="IMAGE_DOWNLOAD_FAILED", **context)
        self.status_code = status_code


def register_error_handlers(app: FastAPI) -> None:
    """Register exception handlers on a FastAPI application.

    Args:
        app: The FastAPI application instance to register handlers on.
    """

    @app.exception_handler(LokeyError)
    async def handle_lokey_error(request: Request, exc: LokeyError) -> JSONResponse:
        logger.error(
            "application_error",
            error_code=exc.error_code,
            message=str(exc),
            path=request.url.path,
            **exc.context,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error_code": exc.error_code,
                "message": str(exc),
                **exc.context,
            },
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"Invalid request body: {field} {first.get('msg', '')}".strip()
        logger.warning("request_validation_failed", path=request.url.path, field=field)
        return JSONResponse(
            status_code=400,
            content={"error_code": "VALIDATION_ERROR", "message": message},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled_error", path=request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error_code": "INTERNAL_ERROR", "message": str(exc) or "Unknown error"},
        )

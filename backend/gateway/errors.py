"""
Gateway error taxonomy and the centralized exception handlers.

Every failure leaves the service as ``{"error": "<message>"}`` with the
status code carried by the exception.
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from gateway.logging import get_logger

logger = get_logger('errors')


class GatewayError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingParameterError(GatewayError):
    """A required request field is absent (400)."""
    status_code = 400
    default_message = "Missing required parameter"


class ImmutableFieldError(GatewayError):
    """An update tried to change a write-once field (400)."""
    status_code = 400
    default_message = "botId and createdBy cannot be changed"


class ForbiddenOriginError(GatewayError):
    """Request origin is not on the bot's allow-list (403)."""
    status_code = 403
    default_message = "Origin not allowed"


class BotNotFoundError(GatewayError):
    """Bot is absent or soft-deleted (404)."""
    status_code = 404
    default_message = "Bot not found"


class DuplicateBotError(GatewayError):
    """A bot with the same identifier already exists (409)."""
    status_code = 409
    default_message = "A bot with this botId already exists"


class RateLimitedError(GatewayError):
    """Request exceeded a rate-limit window (429)."""
    status_code = 429
    default_message = "Too many requests, please try again later."


class GateFailureError(GatewayError):
    """Configuration lookup for origin validation failed (500)."""
    status_code = 500
    default_message = "CORS validation error"


class UpstreamError(GatewayError):
    """The external generation service failed (500)."""
    status_code = 500
    default_message = "Failed to generate response"


def error_response(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def _admitted_headers(request: Request) -> dict[str, str] | None:
    # Set by the origin gate; admitted requests keep them on every error.
    return getattr(request.state, "cors_headers", None)


def register_exception_handlers(app: FastAPI) -> None:
    """Install the handlers that render every failure as an error body."""

    @app.exception_handler(GatewayError)
    async def handle_gateway_error(request: Request, exc: GatewayError):
        if exc.status_code >= 500:
            logger.error(
                "%s %s failed (%d): %s", request.method, request.url.path, exc.status_code, exc.message
            )
        else:
            logger.warning(
                "%s %s rejected (%d): %s", request.method, request.url.path, exc.status_code, exc.message
            )
        return error_response(exc.status_code, exc.message, _admitted_headers(request))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid request")
        if location:
            message = f"{location}: {message}"
        logger.warning("%s %s invalid request: %s", request.method, request.url.path, message)
        return error_response(400, message, _admitted_headers(request))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return error_response(500, "Internal server error", _admitted_headers(request))

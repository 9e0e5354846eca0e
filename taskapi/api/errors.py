"""Global exception handlers: every failure leaves as an error envelope."""

import logging
from collections.abc import Sequence
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskapi.api import responses
from taskapi.config import get_settings
from taskapi.exceptions import AuthError, TaskApiError, ValidationError

logger = logging.getLogger(__name__)

GENERIC_VALIDATION_MESSAGE = "Validation failed"
REQUEST_PARTS = ("body", "query", "path", "header", "cookie")


def format_validation_errors(errors: Sequence[Any]) -> list[dict[str, Any]]:
    """
    Convert pydantic error dicts to ``{field, message, errorCode}`` entries.

    ``field`` is the dotted location inside the request part, so a bad
    ``body.title`` is reported as ``title``.
    """
    formatted = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ())]
        if loc and loc[0] in REQUEST_PARTS and len(loc) > 1:
            loc = loc[1:]
        error_type = err.get("type", "invalid")
        field = ".".join(loc) or "body"
        message = err.get("msg", "Invalid value")

        if error_type == "json_invalid":
            field = "body"
            message = "Request body is not valid JSON"
        elif error_type == "missing":
            message = f"{field.replace('_', ' ').capitalize()} is required"
        elif message.startswith("Value error, "):
            message = message[len("Value error, "):]

        formatted.append({"field": field, "message": message, "errorCode": error_type})
    return formatted


def validation_response(errors: list[dict[str, Any]]) -> JSONResponse:
    message = errors[0]["message"] if len(errors) == 1 else GENERIC_VALIDATION_MESSAGE
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=responses.error(message, status.HTTP_400_BAD_REQUEST, errors),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to error envelopes.

    Handlers:
        RequestValidationError -> 400 with field-level errors
        TaskApiError subclasses -> their own status code
        HTTPException (routing) -> 404 "Endpoint not found", 405, ...
        Exception -> 500, detail hidden in production
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Schema validation failed before the handler ran."""
        errors = format_validation_errors(exc.errors())
        logger.warning(
            "Request validation failed",
            extra={"path": request.url.path, "fields": [e["field"] for e in errors]},
        )
        return validation_response(errors)

    @app.exception_handler(TaskApiError)
    async def handle_app_error(request: Request, exc: TaskApiError):
        """Known application error: status code and message come from the exception."""
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            "%s: %s",
            type(exc).__name__,
            exc.message,
            extra={"path": request.url.path, "context": exc.context},
        )

        if isinstance(exc, ValidationError):
            errors = exc.errors
            if errors is None and exc.field:
                errors = [{"field": exc.field, "message": exc.message, "errorCode": "invalid"}]
            return JSONResponse(
                status_code=exc.status_code,
                content=responses.error(exc.message, exc.status_code, errors),
            )

        extra = dict(exc.extra)
        if exc.code:
            extra["code"] = exc.code
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
        return JSONResponse(
            status_code=exc.status_code,
            content=responses.error(exc.message, exc.status_code, **extra),
            headers=headers,
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        """Routing-level errors raised by Starlette (unknown path, wrong method)."""
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            content = responses.error("Endpoint not found", path=request.url.path)
        else:
            content = responses.error(str(exc.detail), exc.status_code, path=request.url.path)
        return JSONResponse(
            status_code=exc.status_code,
            content=content,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        """Anything else is a bug: log it fully, reveal detail only outside production."""
        logger.exception("Unhandled error", extra={"path": request.url.path})
        if get_settings().is_production:
            message = "Internal server error"
        else:
            message = str(exc) or type(exc).__name__
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=responses.error(message, status.HTTP_500_INTERNAL_SERVER_ERROR),
        )

"""Application exception hierarchy.

Services, repositories and dependencies raise these; the handlers registered
in ``taskapi.api.errors`` turn them into error envelopes with the matching
HTTP status code.

    TaskApiError (base)        -> 500
    ├── AuthError              -> 401
    ├── ForbiddenError         -> 403
    ├── ValidationError        -> 400
    ├── NotFoundError          -> 404
    ├── ConflictError          -> 409
    └── InternalError          -> 500
"""

from typing import Any


class TaskApiError(Exception):
    """Base exception for all Task API errors.

    Attributes:
        message: User-facing description, safe to return in a response.
        context: Debug details that are logged but never returned.
        code: Optional machine-readable error code.
        extra: Additional fields merged into the error envelope.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: dict[str, Any] | None = None,
        code: str | None = None,
        extra: dict[str, Any] | None = None,
    ):
        self.message = message
        self.context = context or {}
        self.code = code
        self.extra = extra or {}
        super().__init__(self.message)


class AuthError(TaskApiError):
    """Missing, malformed, invalid or expired bearer token."""

    status_code = 401

    def __init__(self, message: str, code: str, context: dict[str, Any] | None = None):
        super().__init__(message=message, context=context, code=code)


class ForbiddenError(TaskApiError):
    """The caller is authenticated but may not touch the resource."""

    status_code = 403

    def __init__(
        self,
        message: str = "You do not have permission to access this resource",
        code: str = "FORBIDDEN",
        context: dict[str, Any] | None = None,
        extra: dict[str, Any] | None = None,
    ):
        super().__init__(message=message, context=context, code=code, extra=extra)


class ValidationError(TaskApiError):
    """Input violates a field constraint.

    ``errors`` holds ``{field, message, errorCode}`` entries when the failure
    comes from schema validation; factory-level failures carry a single
    ``field`` instead.
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        field: str | None = None,
        errors: list[dict[str, Any]] | None = None,
        context: dict[str, Any] | None = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field
        self.errors = errors


class NotFoundError(TaskApiError):
    """A task or user id does not exist."""

    status_code = 404

    def __init__(
        self,
        resource: str = "resource",
        resource_id: str | None = None,
        message: str | None = None,
        extra: dict[str, Any] | None = None,
    ):
        if message is None:
            message = f"{resource.capitalize()} not found"
        ctx: dict[str, Any] = {"resource": resource}
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx, extra=extra)
        self.resource = resource
        self.resource_id = resource_id


class ConflictError(TaskApiError):
    """The write clashes with the current state of the resource."""

    status_code = 409

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message=message, context=context, code="CONFLICT")


class InternalError(TaskApiError):
    """Storage failure or other unexpected server-side error."""

    status_code = 500

    def __init__(
        self,
        message: str = "Internal server error",
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message=message, context=context)

"""HTTP middleware for the Task API."""

from taskapi.middleware.logging import RequestLoggingMiddleware

__all__ = ["RequestLoggingMiddleware"]

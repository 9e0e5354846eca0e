"""Liveness endpoint."""

from fastapi import APIRouter

from taskapi.api import responses
from taskapi.api.deps import OptionalIdentity
from taskapi.config import get_settings

router = APIRouter(prefix="/api", tags=["Health"])


@router.get("/health")
async def health_check(identity: OptionalIdentity) -> dict:
    """Health check endpoint. Reports whether the caller sent a valid token."""
    return responses.success(
        "API is running",
        {
            "status": "healthy",
            "environment": get_settings().ENVIRONMENT,
            "authenticated": identity is not None,
        },
    )

"""User API endpoints: email login-or-register."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from taskapi.api import responses
from taskapi.api.deps import CurrentIdentity, UserServiceDep
from taskapi.models import ERROR_RESPONSES
from taskapi.models.user import AuthEnvelope, Mail, ProfileEnvelope, UserCreate

router = APIRouter(prefix="/api/users", tags=["Users"], responses=ERROR_RESPONSES)


@router.post("", response_model=AuthEnvelope, status_code=status.HTTP_201_CREATED)
async def login_or_register_endpoint(
    service: UserServiceDep,
    user_data: UserCreate,
) -> JSONResponse:
    """Sign in with an email address, registering it on first use."""
    result = await service.login_or_register(user_data.mail)
    return JSONResponse(
        status_code=status.HTTP_200_OK if result.exists else status.HTTP_201_CREATED,
        content=responses.auth(result.user, result.token, result.exists),
    )


@router.get("/me", response_model=ProfileEnvelope)
async def current_user_endpoint(
    identity: CurrentIdentity,
    service: UserServiceDep,
) -> JSONResponse:
    """Get the authenticated user's profile."""
    user = await service.get_profile(identity.user_id)
    return JSONResponse(content=responses.user_profile(user))


@router.get("/{mail}", response_model=AuthEnvelope)
async def login_endpoint(service: UserServiceDep, mail: Mail) -> JSONResponse:
    """Sign in an existing user by email address."""
    result = await service.login(mail)
    return JSONResponse(content=responses.user_found(result.user, result.token))

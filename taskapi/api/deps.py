"""API dependencies for dependency injection."""

from typing import Annotated

from fastapi import Depends, Header
from pymongo.asynchronous.database import AsyncDatabase

from taskapi.db.session import get_database
from taskapi.exceptions import AuthError
from taskapi.repositories.tasks import TaskRepository
from taskapi.repositories.users import UserRepository
from taskapi.services.auth import Identity, TokenError, TokenErrorKind, TokenService, get_token_service
from taskapi.services.tasks import TaskService
from taskapi.services.users import UserService

BEARER_PREFIX = "Bearer "

# Token failure kind -> (error code, message)
TOKEN_FAILURES = {
    TokenErrorKind.EXPIRED: ("TOKEN_EXPIRED", "Token has expired"),
    TokenErrorKind.MALFORMED: ("INVALID_TOKEN", "Invalid token"),
    TokenErrorKind.NOT_YET_VALID: ("TOKEN_NOT_ACTIVE", "Token is not active yet"),
}


DBDatabase = Annotated[AsyncDatabase, Depends(get_database)]
Tokens = Annotated[TokenService, Depends(get_token_service)]


def get_task_repository(database: DBDatabase) -> TaskRepository:
    """Get task repository dependency."""
    return TaskRepository(database)


def get_user_repository(database: DBDatabase) -> UserRepository:
    """Get user repository dependency."""
    return UserRepository(database)


def get_task_service(
    repository: Annotated[TaskRepository, Depends(get_task_repository)],
) -> TaskService:
    return TaskService(repository)


def get_user_service(
    repository: Annotated[UserRepository, Depends(get_user_repository)],
    tokens: Tokens,
) -> UserService:
    return UserService(repository, tokens)


def authenticate(authorization: str | None, tokens: TokenService) -> Identity:
    """
    Resolve the ``Authorization`` header to an identity.

    Raises:
        AuthError: MISSING_TOKEN, INVALID_TOKEN_FORMAT, TOKEN_EXPIRED,
            INVALID_TOKEN or TOKEN_NOT_ACTIVE.
    """
    if authorization is None:
        raise AuthError("Authorization token required", code="MISSING_TOKEN")

    token = authorization[len(BEARER_PREFIX):].strip() if authorization.startswith(BEARER_PREFIX) else ""
    if not token:
        raise AuthError(
            "Invalid token format. Use: Bearer <token>",
            code="INVALID_TOKEN_FORMAT",
        )

    try:
        return tokens.verify(token)
    except TokenError as exc:
        code, message = TOKEN_FAILURES[exc.kind]
        raise AuthError(message, code=code) from exc


def get_current_identity(
    tokens: Tokens,
    authorization: Annotated[str | None, Header()] = None,
) -> Identity:
    """Get the authenticated caller, rejecting the request otherwise."""
    return authenticate(authorization, tokens)


def get_optional_identity(
    tokens: Tokens,
    authorization: Annotated[str | None, Header()] = None,
) -> Identity | None:
    """Get the caller if a valid token was sent; never rejects."""
    try:
        return authenticate(authorization, tokens)
    except AuthError:
        return None


CurrentIdentity = Annotated[Identity, Depends(get_current_identity)]
OptionalIdentity = Annotated[Identity | None, Depends(get_optional_identity)]
TaskServiceDep = Annotated[TaskService, Depends(get_task_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]

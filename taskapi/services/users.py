"""User service: email login-or-register and token issuance."""

import logging
from dataclasses import dataclass

from taskapi.exceptions import ConflictError, NotFoundError
from taskapi.factories.user import UserFactory, user_factory
from taskapi.models.user import User
from taskapi.repositories.users import UserRepository
from taskapi.services.auth import Identity, TokenService

logger = logging.getLogger(__name__)


@dataclass
class AuthResult:
    """A user together with a fresh token.

    ``exists`` is True when the user was already registered.
    """

    user: User
    token: str
    exists: bool


class UserService:
    """Passwordless authentication: knowing the address is enough."""

    def __init__(
        self,
        repository: UserRepository,
        tokens: TokenService,
        factory: UserFactory = user_factory,
    ) -> None:
        self.repository = repository
        self.tokens = tokens
        self.factory = factory

    async def login(self, mail: str) -> AuthResult:
        """
        Issue a token for an existing user.

        Args:
            mail: Normalized email address.

        Raises:
            NotFoundError: If no user has this address.
        """
        user = await self.repository.get_by_mail(mail)
        if user is None:
            raise NotFoundError("user", message="User not found", extra={"exists": False})
        return self._authenticate(user, exists=True)

    async def login_or_register(self, mail: str) -> AuthResult:
        """
        Issue a token, creating the user first if the address is new.

        A registration that loses a race against a concurrent one for the
        same address is resolved as a login of the winner.
        """
        user = await self.repository.get_by_mail(mail)
        if user is not None:
            return self._authenticate(user, exists=True)

        new_user = self.factory.from_create(mail)
        try:
            user = await self.repository.create(new_user)
        except ConflictError:
            user = await self.repository.get_by_mail(new_user.mail)
            if user is None:
                raise
            return self._authenticate(user, exists=True)

        logger.info("User created", extra={"user_id": user.id})
        return self._authenticate(user, exists=False)

    async def get_profile(self, user_id: str) -> User:
        """Raises NotFoundError if the token's user no longer exists."""
        user = await self.repository.get_by_id(user_id)
        if user is None:
            raise NotFoundError("user", user_id, message="User not found")
        return user

    def _authenticate(self, user: User, exists: bool) -> AuthResult:
        token = self.tokens.issue(Identity(user_id=user.id or "", mail=user.mail))
        return AuthResult(user=user, token=token, exists=exists)

"""Token service: issues and verifies signed identity tokens (JWT, HS256)."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from functools import lru_cache
from typing import Any

from jose import JWTError, jwt

from taskapi.config import INSECURE_DEFAULT_SECRET, get_settings
from taskapi.utils import utcnow

logger = logging.getLogger(__name__)

NEAR_EXPIRY_THRESHOLD = timedelta(hours=1)


class TokenErrorKind(str, Enum):
    """Why a token was rejected."""

    EXPIRED = "expired"
    MALFORMED = "malformed"
    NOT_YET_VALID = "not_yet_valid"


class TokenError(Exception):
    """Raised by ``TokenService.verify`` when a token is not acceptable."""

    def __init__(self, kind: TokenErrorKind, message: str):
        self.kind = kind
        self.message = message
        super().__init__(message)


@dataclass(frozen=True)
class Identity:
    """Authenticated caller as embedded in a token."""

    user_id: str
    mail: str


class TokenService:
    """Issue and verify time-limited identity tokens.

    The secret, lifetime, issuer and audience are fixed at construction; the
    clock is injectable so expiry can be tested without sleeping.
    """

    def __init__(
        self,
        secret: str,
        *,
        expires_in: timedelta = timedelta(hours=24),
        issuer: str = "task-api",
        audience: str = "task-api-client",
        algorithm: str = "HS256",
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._secret = secret
        self._expires_in = expires_in
        self._issuer = issuer
        self._audience = audience
        self._algorithm = algorithm
        self._clock = clock

    def issue(self, identity: Identity, not_before: datetime | None = None) -> str:
        """
        Sign a token for ``identity``.

        Args:
            identity: User id and normalized email to embed.
            not_before: Optional activation time (``nbf`` claim).

        Returns:
            Compact, URL-safe JWT string.
        """
        now = self._clock()
        claims: dict[str, Any] = {
            "id_user": identity.user_id,
            "mail": identity.mail,
            "iat": int(now.timestamp()),
            "exp": int((now + self._expires_in).timestamp()),
            "iss": self._issuer,
            "aud": self._audience,
        }
        if not_before is not None:
            claims["nbf"] = int(not_before.timestamp())
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> Identity:
        """
        Verify signature, issuer, audience and validity window.

        Args:
            token: Compact JWT string.

        Returns:
            The embedded identity.

        Raises:
            TokenError: EXPIRED once the current time reaches ``exp``,
                NOT_YET_VALID while ``nbf`` is in the future, MALFORMED for
                anything else (bad signature, encoding, issuer, audience or
                missing claims).
        """
        try:
            # Time claims are checked below so that "at exp" already counts as expired.
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                audience=self._audience,
                issuer=self._issuer,
                options={
                    "verify_exp": False,
                    "verify_nbf": False,
                    "verify_iat": False,
                    "require_aud": True,
                    "require_iss": True,
                },
            )
        except JWTError as exc:
            raise TokenError(TokenErrorKind.MALFORMED, "Invalid token") from exc

        # jose only compares aud/iss when the claim is present
        if "aud" not in claims or claims.get("iss") != self._issuer:
            raise TokenError(TokenErrorKind.MALFORMED, "Invalid token")

        now = self._clock().timestamp()
        expires_at = claims.get("exp")
        if isinstance(expires_at, bool) or not isinstance(expires_at, (int, float)):
            raise TokenError(TokenErrorKind.MALFORMED, "Invalid token")
        if now >= expires_at:
            raise TokenError(TokenErrorKind.EXPIRED, "Token expired")

        not_before = claims.get("nbf")
        if not_before is not None:
            if isinstance(not_before, bool) or not isinstance(not_before, (int, float)):
                raise TokenError(TokenErrorKind.MALFORMED, "Invalid token")
            if not_before > now:
                raise TokenError(TokenErrorKind.NOT_YET_VALID, "Token not yet valid")

        user_id = claims.get("id_user")
        mail = claims.get("mail")
        if not isinstance(user_id, str) or not user_id or not isinstance(mail, str) or not mail:
            raise TokenError(TokenErrorKind.MALFORMED, "Invalid token")
        return Identity(user_id=user_id, mail=mail)

    @staticmethod
    def decode(token: str) -> dict[str, Any] | None:
        """Read claims without verifying anything. For diagnostics only."""
        try:
            return jwt.get_unverified_claims(token)
        except JWTError:
            return None

    def get_expiration(self, token: str) -> datetime | None:
        claims = self.decode(token)
        if not claims or not isinstance(claims.get("exp"), (int, float)):
            return None
        return datetime.fromtimestamp(claims["exp"], tz=timezone.utc)

    def is_near_expiry(self, token: str, threshold: timedelta = NEAR_EXPIRY_THRESHOLD) -> bool:
        """True when less than ``threshold`` remains, or the token is unreadable."""
        expires_at = self.get_expiration(token)
        if expires_at is None:
            return True
        return expires_at - self._clock() < threshold


@lru_cache
def get_token_service() -> TokenService:
    """Get the process-wide token service built from settings."""
    settings = get_settings()
    if settings.JWT_SECRET == INSECURE_DEFAULT_SECRET:
        logger.warning("JWT_SECRET is not set; using the insecure development default")
    return TokenService(
        settings.JWT_SECRET,
        expires_in=timedelta(hours=settings.JWT_EXPIRATION_HOURS),
        issuer=settings.JWT_ISSUER,
        audience=settings.JWT_AUDIENCE,
        algorithm=settings.JWT_ALGORITHM,
    )

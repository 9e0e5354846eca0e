"""User factory: email normalization and storage reconciliation."""

from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from taskapi.exceptions import ValidationError
from taskapi.factories.fields import apply_rule, coerce_datetime, first_present
from taskapi.models.rules import normalize_mail
from taskapi.models.user import AuthUser, User
from taskapi.utils import utcnow

# Older documents stored the address under "email".
MAIL_FIELDS = ("mail", "email")


class UserFactory:
    """Builds ``User`` values from client input and from stored documents."""

    def __init__(self, clock: Callable[[], datetime] = utcnow) -> None:
        self._clock = clock

    @staticmethod
    def normalize_mail(mail: Any) -> str:
        """Lower-case, trim and validate an email address.

        Raises:
            ValidationError: If the address is empty, too long or malformed.
        """
        if not isinstance(mail, str):
            raise ValidationError("Email must be a string", field="mail")
        return apply_rule(normalize_mail, mail, "mail")

    def from_create(self, mail: Any) -> User:
        return User(mail=self.normalize_mail(mail), created_at=self._clock())

    def from_storage(self, user_id: Any, raw: Mapping[str, Any]) -> User:
        mail = first_present(raw, MAIL_FIELDS)
        return User(
            id=str(user_id),
            mail=mail.strip().lower() if isinstance(mail, str) else "",
            created_at=coerce_datetime(raw.get("created_at")),
        )

    @staticmethod
    def to_document(user: User) -> dict[str, Any]:
        return {"mail": user.mail, "created_at": user.created_at}

    @staticmethod
    def to_auth_user(user: User) -> AuthUser:
        """Project a stored user to the fields safe to return to clients."""
        return AuthUser(id=user.id or "", mail=user.mail)

    @staticmethod
    def is_same_user(first: User, second: User) -> bool:
        if first.id and second.id:
            return first.id == second.id
        return first.mail == second.mail

    @staticmethod
    def email_matches(user: User, mail: str) -> bool:
        return user.mail == mail.strip().lower()


user_factory = UserFactory()

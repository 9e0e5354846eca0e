"""Field rules shared by the request schemas and the entity factories.

Each rule normalizes a raw value and raises ``PydanticCustomError`` with a
stable error type and a human-readable message. Pydantic reports these as
regular validation errors; the factories convert them to ``ValidationError``.
"""

import re

from pydantic_core import PydanticCustomError

TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500
MAIL_MAX_LENGTH = 254
PRIORITY_MIN = 0
PRIORITY_MAX = 10

# RFC 5322 (practical subset): local part, then dot-separated DNS labels
EMAIL_PATTERN = re.compile(
    r"[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*"
)


def normalize_title(value: str) -> str:
    """Trim a task title and enforce its 1-100 character bounds."""
    title = value.strip()
    if not title:
        raise PydanticCustomError("required", "Title is required")
    if len(title) > TITLE_MAX_LENGTH:
        raise PydanticCustomError(
            "too_long", f"Title cannot exceed {TITLE_MAX_LENGTH} characters"
        )
    return title


def normalize_description(value: str | None) -> str:
    """Trim a description; a missing one becomes the empty string."""
    if value is None:
        return ""
    description = value.strip()
    if len(description) > DESCRIPTION_MAX_LENGTH:
        raise PydanticCustomError(
            "too_long",
            f"Description cannot exceed {DESCRIPTION_MAX_LENGTH} characters",
        )
    return description


def check_priority(value: int) -> int:
    if not PRIORITY_MIN <= value <= PRIORITY_MAX:
        raise PydanticCustomError(
            "out_of_range",
            f"Priority must be between {PRIORITY_MIN} and {PRIORITY_MAX}",
        )
    return value


def normalize_mail(value: str) -> str:
    """Lower-case and trim an email address, then check its format and length."""
    mail = value.strip().lower()
    if not mail:
        raise PydanticCustomError("required", "Email is required")
    if len(mail) > MAIL_MAX_LENGTH:
        raise PydanticCustomError(
            "too_long", f"Email cannot exceed {MAIL_MAX_LENGTH} characters"
        )
    if not EMAIL_PATTERN.fullmatch(mail):
        raise PydanticCustomError("invalid_format", "Invalid email format")
    return mail


def normalize_task_id(value: str) -> str:
    task_id = value.strip()
    if not task_id:
        raise PydanticCustomError("required", "Task id is required")
    return task_id


def normalize_user_id(value: str) -> str:
    user_id = value.strip()
    if not user_id:
        raise PydanticCustomError("required", "User id cannot be empty")
    return user_id

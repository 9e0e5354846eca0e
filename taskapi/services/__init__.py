"""Services for the Task API.

Services:
- auth.py: Token issuance and verification
- authorization.py: Ownership policy for task operations
- tasks.py: Task use cases over the task repository
- users.py: Email login-or-register
"""

from taskapi.services.auth import Identity, TokenError, TokenErrorKind, TokenService, get_token_service
from taskapi.services.tasks import TaskService
from taskapi.services.users import AuthResult, UserService

__all__ = [
    # Tokens
    "Identity",
    "TokenError",
    "TokenErrorKind",
    "TokenService",
    "get_token_service",
    # Use cases
    "TaskService",
    "UserService",
    "AuthResult",
]

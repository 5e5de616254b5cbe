"""
Typed failures raised by the user service

Each kind carries the HTTP status the gateway answers with, so the
mapping from failure to response stays in one place.
"""


class UserServiceError(Exception):
    """Base class for user service failures"""

    status_code = 500

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class ConflictError(UserServiceError):
    """The username is already taken"""

    status_code = 409


class UnauthorizedError(UserServiceError):
    """Bad credentials, or a token that does not belong to a live session"""

    status_code = 401


class NotFoundError(UserServiceError):
    """No user with the requested identifier"""

    status_code = 404


USERNAME_NOT_UNIQUE = "The username provided is not unique. Therefore, the user could not be created!"
INVALID_CREDENTIALS = "Invalid username or password"
USER_NOT_FOUND = "User not found"
AUTHORIZATION_FAILED = "Authorization failed"


__all__ = [
    "UserServiceError",
    "ConflictError",
    "UnauthorizedError",
    "NotFoundError",
    "USERNAME_NOT_UNIQUE",
    "INVALID_CREDENTIALS",
    "USER_NOT_FOUND",
    "AUTHORIZATION_FAILED",
]
